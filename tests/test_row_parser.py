"""
Unit tests for the interleaved-row parser.

Row contract:
- A row starts at a line holding only a 5-digit CRN
- An optional dash chain right after it lists the CRNs sharing the exam
- Rows without a date borrow date/time from a complete row of the same group
- Rows still lacking date or time are dropped, never defaulted
"""

import unittest
from datetime import date

from finals_schedule.extraction.records import RowRecord
from finals_schedule.extraction.row_parser import backfill_rows, is_anchor, parse_row_layout, read_rows


class TestAnchors(unittest.TestCase):
    def test_anchor(self) -> None:
        self.assertTrue(is_anchor("27975"))
        self.assertTrue(is_anchor("07975"))
        self.assertFalse(is_anchor("27975-27976"))
        self.assertFalse(is_anchor("279750"))


class TestParseRowLayout(unittest.TestCase):
    def test_summer_single_row(self) -> None:
        text = "SUMMER 2025\n31001\nThursday, August 14, 2025\n1:00PM-5:00PM\nONLINE\n"
        entries = parse_row_layout(text)
        self.assertEqual(len(entries), 1)
        e = entries[0]
        self.assertEqual(e.crn, 31001)
        self.assertEqual(e.combined_crns, (31001,))
        self.assertEqual(e.exam_date, date(2025, 8, 14))
        self.assertEqual((e.start_time, e.end_time), (780, 1020))
        self.assertEqual(e.location, "ONLINE")

    def test_adjacent_anchors_without_shared_group(self) -> None:
        # 14611 has no chain, so its group is {14611} and nothing can be borrowed
        text = "14611\n14612\nWednesday, December 10, 2025\n12:45PM-2:45PM\nWENTW 212"
        entries = parse_row_layout(text)
        self.assertEqual([e.crn for e in entries], [14612])
        self.assertEqual(entries[0].exam_date, date(2025, 12, 10))
        self.assertEqual((entries[0].start_time, entries[0].end_time), (765, 885))
        self.assertEqual(entries[0].location, "WENTW 212")

    def test_multi_section_chain(self) -> None:
        text = (
            "27975\n27975-27976\nMonday, December 9, 2024\n8:00AM-10:00AM\nWENTW 212\n"
            "27976\n27975-27976\nMonday, December 9, 2024\n8:00AM-10:00AM\nWENTW 212\n"
        )
        entries = parse_row_layout(text)
        self.assertEqual([e.crn for e in entries], [27975, 27976])
        for e in entries:
            self.assertEqual(e.combined_crns, (27975, 27976))

    def test_chain_missing_own_crn(self) -> None:
        text = "27977\n27975-27976\nMonday, December 9, 2024\n8:00AM-10:00AM\nWENTW 212\n"
        entries = parse_row_layout(text)
        self.assertEqual(entries[0].combined_crns, (27977, 27975, 27976))

    def test_sibling_missing_from_chain_is_backfilled(self) -> None:
        text = (
            "27975\n27975-27976\nMonday, December 9, 2024\n8:00AM-10:00AM\nWENTW 212\n"
            "27977\n27975-27976\nSEE FACULTY\n"
        )
        entries = parse_row_layout(text)
        self.assertEqual([e.crn for e in entries], [27975, 27977])
        sibling = entries[1]
        self.assertEqual(sibling.combined_crns, (27977, 27975, 27976))
        self.assertEqual(sibling.exam_date, date(2024, 12, 9))
        self.assertEqual((sibling.start_time, sibling.end_time), (480, 600))

    def test_small_number_ends_previous_row(self) -> None:
        # "01234" is below the CRN range but still starts a new row
        text = "14611\n01234\nWednesday, December 10, 2025\n12:45PM-2:45PM\nWENTW 212\n"
        self.assertEqual(parse_row_layout(text), [])

    def test_backfill_from_group_sibling(self) -> None:
        text = (
            "27975\n27975-27976\nMonday, December 9, 2024\n8:00AM-10:00AM\nWENTW 212\n"
            "27976\n27975-27976\nSEE FACULTY\n"
        )
        entries = parse_row_layout(text)
        self.assertEqual([e.crn for e in entries], [27975, 27976])
        filled = entries[1]
        self.assertEqual(filled.exam_date, date(2024, 12, 9))
        self.assertEqual((filled.start_time, filled.end_time), (480, 600))
        self.assertEqual(filled.location, "WENTW 212")

    def test_date_without_time_and_no_sibling_is_dropped(self) -> None:
        text = "28001\nTuesday, December 10, 2024\nWENTW 101\n"
        self.assertEqual(parse_row_layout(text), [])

    def test_dated_row_is_never_overwritten(self) -> None:
        text = (
            "27975\n27975-27976\nMonday, December 9, 2024\n8:00AM-10:00AM\nWENTW 212\n"
            "27976\n27975-27976\nTuesday, December 10, 2024\nWENTW 101\n"
        )
        entries = parse_row_layout(text)
        self.assertEqual([e.crn for e in entries], [27975])

    def test_no_dedup(self) -> None:
        row = "31001\nThursday, August 14, 2025\n1:00PM-5:00PM\nONLINE\n"
        self.assertEqual(len(parse_row_layout(row + row)), 2)


class TestBackfillRows(unittest.TestCase):
    def test_first_complete_donor_wins(self) -> None:
        group = (27975, 27976)
        first = RowRecord(crn=27975, combined_crns=group, exam_date=date(2024, 12, 9), start_time=480, end_time=600)
        second = RowRecord(crn=27975, combined_crns=group, exam_date=date(2024, 12, 11), start_time=780, end_time=900)
        empty = RowRecord(crn=27976, combined_crns=(27976, 27975))
        out = backfill_rows([first, second, empty])
        self.assertEqual(out[2].exam_date, date(2024, 12, 9))
        self.assertEqual(out[2].start_time, 480)
        self.assertEqual(out[:2], [first, second])

    def test_no_donor_leaves_row_incomplete(self) -> None:
        rows = read_rows(["28001", "WENTW 101"])
        out = backfill_rows(rows)
        self.assertFalse(out[0].is_complete)
        self.assertIsNone(out[0].promote())


if __name__ == "__main__":
    unittest.main()
