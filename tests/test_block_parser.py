"""
Unit tests for the column-block parser.

The layout renders each table column as a contiguous block of lines; row i
is rebuilt from position i of same-sized CRN / date / time / room blocks.
"""

import unittest
from datetime import date

from finals_schedule.extraction.block_parser import (
    build_blocks,
    classify_line,
    classify_lines,
    is_crn_line,
    is_location_line,
    parse_block_layout,
    parse_crn_line,
    repair_merged_crns,
)
from finals_schedule.extraction.records import LineTag

FALL_2025 = """FALL 2025 FINAL EXAM SCHEDULE
COURSE SECTION
COMBINED CRNs
EXAM-DATE
EXAM-TIME
EXAM-ROOM
ARCH1000-01
ARCH2000-01
COMP1000-02
10001
10002-10003
10004
Monday, December 8, 2025
Tuesday, December 9, 2025
Wednesday, December 10, 2025
8:00AM-10:00AM
10:15AM-12:15PM
12:45PM-2:45PM
WENTW 212
CEIS 414A/B
ONLINE
Page 1
"""


class TestCrnLines(unittest.TestCase):
    def test_merged_pair_repair(self) -> None:
        self.assertEqual(repair_merged_crns("1458814589"), "14588-14589")
        self.assertEqual(parse_crn_line("1458814589"), (14588, 14589))

    def test_merged_triple(self) -> None:
        self.assertEqual(parse_crn_line("145881458914590"), (14588, 14589, 14590))

    def test_odd_length_run_left_alone(self) -> None:
        self.assertEqual(repair_merged_crns("14588145891"), "14588145891")
        self.assertFalse(is_crn_line("14588145891"))

    def test_chain_ordered_and_unique(self) -> None:
        self.assertEqual(parse_crn_line("10003-10002-10003"), (10003, 10002))

    def test_small_numbers_dropped(self) -> None:
        self.assertEqual(parse_crn_line("09999-10001"), (10001,))

    def test_crn_line_predicate(self) -> None:
        self.assertTrue(is_crn_line("10001"))
        self.assertTrue(is_crn_line("10002-10003"))
        self.assertTrue(is_crn_line("1458814589"))
        self.assertFalse(is_crn_line("ARCH1000-01"))


class TestClassification(unittest.TestCase):
    def test_rule_order(self) -> None:
        self.assertEqual(classify_line("10001"), LineTag.CRN)
        self.assertEqual(classify_line("Monday, December 8, 2025"), LineTag.DATE)
        # a weekday line carrying a time range stays a date
        self.assertEqual(classify_line("Monday, Dec 8, 2025 8:00AM-10:00AM"), LineTag.DATE)
        self.assertEqual(classify_line("8:00AM-10:00AM"), LineTag.TIME)
        self.assertEqual(classify_line("WENTW 212"), LineTag.LOCATION)
        self.assertEqual(classify_line("ARCH1000-01"), LineTag.OTHER)

    def test_year_span_is_not_a_time_line(self) -> None:
        self.assertEqual(classify_line("Academic Year 2025-2026"), LineTag.OTHER)

    def test_time_with_building_is_not_a_time_line(self) -> None:
        self.assertNotEqual(classify_line("8:00AM-10:00AM WENTW 212"), LineTag.TIME)

    def test_location_predicate(self) -> None:
        self.assertTrue(is_location_line("CEIS 414A/B"))
        self.assertTrue(is_location_line("Watson Auditorium"))
        self.assertTrue(is_location_line("SEE FACULTY"))
        self.assertFalse(is_location_line("Introduction to Design"))

    def test_headers_dropped(self) -> None:
        lines = ["COMBINED CRNs", "EXAM-DATE", "10001", "Page 2"]
        classified = classify_lines(lines)
        self.assertEqual([c.text for c in classified], ["10001"])
        self.assertEqual(classified[0].index, 0)

    def test_blocks_are_maximal_runs(self) -> None:
        lines = ["10001", "10002", "Monday, December 8, 2025", "Tuesday, December 9, 2025", "8:00AM-10:00AM"]
        blocks = build_blocks(classify_lines(lines))
        self.assertEqual([(b.tag, b.size) for b in blocks], [(LineTag.CRN, 2), (LineTag.DATE, 2), (LineTag.TIME, 1)])
        self.assertEqual((blocks[1].start_idx, blocks[1].end_idx), (2, 3))


class TestParseBlockLayout(unittest.TestCase):
    def test_three_rows(self) -> None:
        entries = parse_block_layout(FALL_2025)
        self.assertEqual([e.crn for e in entries], [10001, 10002, 10003, 10004])

        first = entries[0]
        self.assertEqual(first.exam_date, date(2025, 12, 8))
        self.assertEqual((first.start_time, first.end_time), (480, 600))
        self.assertEqual(first.location, "WENTW 212")

        combined = entries[1]
        self.assertEqual(combined.combined_crns, (10002, 10003))
        self.assertEqual(entries[2].combined_crns, (10002, 10003))
        self.assertEqual(combined.location, "CEIS 414A / CEIS 414B")
        self.assertEqual((combined.start_time, combined.end_time), (615, 735))

        last = entries[3]
        self.assertEqual(last.exam_date, date(2025, 12, 10))
        self.assertEqual((last.start_time, last.end_time), (765, 885))
        self.assertEqual(last.location, "ONLINE")

    def test_every_crn_in_its_group(self) -> None:
        for e in parse_block_layout(FALL_2025):
            self.assertIn(e.crn, e.combined_crns)
            self.assertLess(e.start_time, e.end_time)

    def test_merged_crn_line(self) -> None:
        text = "1458814589\n14600\nMonday, December 8, 2025\nTuesday, December 9, 2025\n8:00AM-10:00AM\n1:00PM-3:00PM\n"
        entries = parse_block_layout(text)
        self.assertEqual([e.crn for e in entries], [14588, 14589, 14600])
        self.assertEqual(entries[0].combined_crns, (14588, 14589))
        self.assertIsNone(entries[0].location)

    def test_first_occurrence_wins(self) -> None:
        text = (
            "10001\nMonday, December 8, 2025\n8:00AM-10:00AM\nWENTW 212\n"
            "ARCH1000-01\n"
            "10001\nFriday, December 12, 2025\n1:00PM-3:00PM\nWENTW 101\n"
        )
        entries = parse_block_layout(text)
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].exam_date, date(2025, 12, 8))
        self.assertEqual(entries[0].location, "WENTW 212")

    def test_doubled_document_is_stable(self) -> None:
        once = parse_block_layout(FALL_2025)
        twice = parse_block_layout(FALL_2025 + "\n" + FALL_2025)
        self.assertEqual(once, twice)

    def test_unmatched_block_sizes(self) -> None:
        text = "10001\n10002\nMonday, December 8, 2025\n8:00AM-10:00AM\n"
        self.assertEqual(parse_block_layout(text), [])

    def test_empty(self) -> None:
        self.assertEqual(parse_block_layout(""), [])


if __name__ == "__main__":
    unittest.main()
