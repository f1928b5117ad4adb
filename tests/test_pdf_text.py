"""
Unit tests for PDF text extraction (pdftotext subprocess mocked out).
"""

import os
import subprocess
import unittest
from unittest import mock

from finals_schedule.extraction import pdf_text
from finals_schedule.extraction.pdf_text import TextExtractionError, extract_pdf_text


def _completed(stdout: bytes) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["pdftotext", "-", "-"], returncode=0, stdout=stdout, stderr=b"")


class TestExtractPdfText(unittest.TestCase):
    def setUp(self) -> None:
        self._env = mock.patch.dict(os.environ, {}, clear=False)
        self._env.start()
        os.environ.pop("FINALS_TEXT_ENGINE", None)

    def tearDown(self) -> None:
        self._env.stop()

    def test_pdftotext_reads_stdin(self) -> None:
        with mock.patch.object(pdf_text.subprocess, "run", return_value=_completed(b"10001\n")) as run:
            self.assertEqual(extract_pdf_text(b"%PDF-1.4"), "10001\n")
        args, kwargs = run.call_args
        self.assertEqual(args[0], ["pdftotext", "-", "-"])
        self.assertEqual(kwargs["input"], b"%PDF-1.4")

    def test_missing_binary(self) -> None:
        with mock.patch.object(pdf_text.subprocess, "run", side_effect=FileNotFoundError("pdftotext")):
            with self.assertRaises(TextExtractionError) as ctx:
                extract_pdf_text(b"%PDF-1.4")
        self.assertIn("pdftotext", str(ctx.exception))

    def test_tool_failure_carries_stderr(self) -> None:
        err = subprocess.CalledProcessError(1, ["pdftotext"], stderr=b"Syntax Error: Couldn't find trailer")
        with mock.patch.object(pdf_text.subprocess, "run", side_effect=err):
            with self.assertRaises(TextExtractionError) as ctx:
                extract_pdf_text(b"%PDF-1.4")
        self.assertIn("Couldn't find trailer", str(ctx.exception))

    def test_blank_output_is_fatal(self) -> None:
        with mock.patch.object(pdf_text.subprocess, "run", return_value=_completed(b"  \n\f")):
            with self.assertRaises(TextExtractionError):
                extract_pdf_text(b"%PDF-1.4")

    def test_empty_bytes(self) -> None:
        with self.assertRaises(TextExtractionError):
            extract_pdf_text(b"")

    def test_unknown_engine(self) -> None:
        with self.assertRaises(ValueError):
            extract_pdf_text(b"%PDF-1.4", engine="tesseract")

    def test_engine_from_environment(self) -> None:
        os.environ["FINALS_TEXT_ENGINE"] = "pdfplumber"
        with mock.patch.object(pdf_text, "extract_text_pdfplumber", return_value="10001") as plumber:
            self.assertEqual(extract_pdf_text(b"%PDF-1.4"), "10001")
        plumber.assert_called_once_with(b"%PDF-1.4")

    def test_pdfplumber_failure_wrapped(self) -> None:
        with self.assertRaises(TextExtractionError):
            extract_pdf_text(b"not a pdf at all", engine="pdfplumber")


if __name__ == "__main__":
    unittest.main()
