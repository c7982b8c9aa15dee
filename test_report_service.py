import unittest
import io
import json
import sys
import os

import pandas as pd

# Add backend to path
sys.path.append(os.path.join(os.path.dirname(os.path.abspath(__file__)), 'backend'))

from fastapi.testclient import TestClient

from app.config import settings
from app.core.exceptions import (
    InvalidReportTypeError,
    NoFilesProvidedError,
    ParseFailureError,
    TooManyFilesError,
    UnsupportedFormatError,
)
from app.models.schemas import DomainTag
from app.layers.l1_ingestion.parser import decode, normalize_cell, load_record_set
from app.services.report_service import (
    UploadedFile,
    create_error_report,
    generate_report,
    generate_reports,
    parse_report_type,
    process_file,
    summarize_batch,
)
from app.main import app

FINANCIAL_CSV = b'revenue,expense\n"$1,000",400\n"$2,000",600\n'


class TestDecodeAdapter(unittest.TestCase):
    def test_csv_keeps_raw_strings_for_coercion(self):
        rows = decode(FINANCIAL_CSV, "csv")
        self.assertEqual(len(rows), 2)
        self.assertEqual(rows[0]["revenue"], "$1,000")
        self.assertEqual(rows[1]["expense"], 600)

    def test_csv_headers_are_trimmed(self):
        record_set = load_record_set(b" name , score \nann,3\n", "people.csv")
        self.assertEqual(record_set.columns, ("name", "score"))
        self.assertEqual(record_set.records[0], {"name": "ann", "score": 3})

    def test_blank_cells_become_none(self):
        record_set = load_record_set(b"a,b\n1,\n2,5\n", "gaps.csv")
        self.assertIsNone(record_set.records[0]["b"])
        self.assertEqual(record_set.records[1]["b"], 5.0)

    def test_json_shapes(self):
        self.assertEqual(len(decode(b'[{"a": 1}, {"a": 2}]', "json")), 2)
        self.assertEqual(len(decode(b'{"data": [{"a": 1}, {"a": 2}, {"a": 3}]}', "json")), 3)
        self.assertEqual(decode(b'{"a": 1, "b": "x"}', "json"), [{"a": 1, "b": "x"}])

    def test_xlsx(self):
        buffer = io.BytesIO()
        pd.DataFrame({"sales": [10, 20], "product": ["a", "b"]}).to_excel(buffer, index=False)
        rows = decode(buffer.getvalue(), "xlsx")
        self.assertEqual(rows, [{"sales": 10, "product": "a"}, {"sales": 20, "product": "b"}])

    def test_empty_csv_yields_no_rows(self):
        self.assertEqual(decode(b"", "csv"), [])
        self.assertEqual(decode(b"a,b\n", "csv"), [])

    def test_failures(self):
        with self.assertRaises(UnsupportedFormatError):
            decode(b"hello", "txt")
        with self.assertRaises(ParseFailureError):
            decode(b"{not json", "json")
        with self.assertRaises(ParseFailureError):
            decode(b"not a workbook", "xlsx")

    def test_normalize_cell(self):
        self.assertIsNone(normalize_cell(float("nan")))
        self.assertIsNone(normalize_cell(pd.NaT))
        self.assertEqual(normalize_cell(pd.Timestamp("2024-01-02")), "2024-01-02T00:00:00")
        self.assertIsInstance(normalize_cell(pd.Series([1]).iloc[0]), int)


class TestReportAssembler(unittest.TestCase):
    def test_financial_example(self):
        report = generate_report(
            [{"revenue": "$1,000", "expense": 400}, {"revenue": "$2,000", "expense": 600}],
            "q1.csv"
        )
        self.assertEqual(report.report_type, "financial")
        self.assertEqual(report.data["headline_metrics"]["profit_margin"], 66.67)
        self.assertEqual(report.summary["total_records"], 2)
        self.assertEqual(report.summary["total_columns"], 2)
        self.assertEqual(report.summary["key_insights"], report.data["executive_summary"])
        self.assertEqual(report.data_info.rows_analyzed, 2)
        # Both columns support the financial domain
        self.assertAlmostEqual(report.metadata.confidence, 0.8)
        self.assertEqual(report.metadata.data_quality, "Excellent")
        self.assertIn("Add date columns for time-series analysis", report.metadata.suggestions)
        self.assertGreaterEqual(report.metadata.processing_time_ms, 0)

    def test_empty_records_give_error_report(self):
        report = generate_report([], "empty.csv")
        self.assertEqual(report.report_type, "error")
        self.assertEqual(report.summary["total_records"], 0)
        self.assertEqual(report.metadata.confidence, 0)
        self.assertEqual(report.metadata.data_quality, "Poor")
        self.assertEqual(set(report.data), {"error", "executive_summary"})

    def test_volume_and_completeness_example(self):
        columns = ["id", "title", "year", "rating"]
        records = []
        for i in range(150):
            record = {"id": i, "title": f"book {i}", "year": 1900 + i, "rating": i % 5}
            if i < 30:
                record["year"] = None
            records.append(record)

        report = generate_report(records, "books.csv")
        self.assertEqual(report.report_type, "general")
        self.assertEqual(report.metadata.data_quality, "Excellent")
        self.assertGreaterEqual(report.metadata.confidence, 0.7 - 1e-9)

    def test_preferred_type_overrides_detection(self):
        report = generate_report([{"revenue": 5}], "r.csv", DomainTag.SALES)
        self.assertEqual(report.report_type, "sales")

        report = generate_report([{"revenue": 5}], "r.csv", DomainTag.MARKETING)
        self.assertEqual(report.report_type, "general")
        self.assertEqual(report.data["detected_domain"], "marketing")

    def test_unknown_preferred_type_is_rejected(self):
        for value in ("error", "weather"):
            with self.assertRaises(InvalidReportTypeError):
                generate_report([{"revenue": 5}], "r.csv", value)

        report = process_file(UploadedFile("r.csv", FINANCIAL_CSV), "weather")
        self.assertEqual(report.report_type, "error")
        self.assertIn("Invalid report type", report.data["error"])

    def test_overflowing_column_does_not_fail_file(self):
        content = b'[{"revenue": 1e308, "cost": 1}, {"revenue": 1e308, "cost": 1}]'
        report = process_file(UploadedFile("big.json", content))

        self.assertEqual(report.report_type, "financial")
        self.assertNotIn("revenue", report.data["basic_stats"])
        self.assertEqual(report.data["basic_stats"]["cost"]["sum"], 2)

    def test_parse_report_type(self):
        self.assertEqual(parse_report_type("auto"), "auto")
        self.assertEqual(parse_report_type(None), "auto")
        self.assertEqual(parse_report_type("Financial"), DomainTag.FINANCIAL)
        for value in ("error", "weather"):
            with self.assertRaises(InvalidReportTypeError):
                parse_report_type(value)

    def test_error_report_shape(self):
        report = create_error_report("bad.csv", "boom")
        self.assertEqual(report.data["executive_summary"], "Failed to process bad.csv: boom")
        self.assertEqual(report.summary["key_insights"], "Error processing file: boom")
        self.assertEqual(
            report.metadata.suggestions,
            ["Fix data format issues", "Ensure file is not corrupted"]
        )


class TestBatchProcessing(unittest.TestCase):
    def test_one_failure_does_not_abort_batch(self):
        files = [
            UploadedFile("q1.csv", FINANCIAL_CSV),
            UploadedFile("broken.json", b"{oops"),
            UploadedFile("empty.csv", b""),
            UploadedFile("notes.txt", b"hello"),
        ]
        reports = generate_reports(files)

        self.assertEqual(len(reports), 4)
        self.assertEqual([r.file_name for r in reports], [f.name for f in files])
        self.assertEqual([r.report_type for r in reports], ["financial", "error", "error", "error"])
        self.assertIn("No data found", reports[2].data["error"])
        self.assertIn("Unsupported file format", reports[3].data["error"])

        metadata = summarize_batch(reports, 12)
        self.assertEqual(metadata.successful_reports, 1)
        self.assertEqual(metadata.failed_reports, 3)

    def test_thread_pool_preserves_order(self):
        files = [UploadedFile(f"f{i}.csv", FINANCIAL_CSV if i % 2 else b"") for i in range(6)]
        sequential = generate_reports(files, max_workers=1)
        pooled = generate_reports(files, max_workers=4)
        self.assertEqual(
            [(r.file_name, r.report_type) for r in sequential],
            [(r.file_name, r.report_type) for r in pooled]
        )

    def test_batch_level_failures(self):
        with self.assertRaises(NoFilesProvidedError):
            generate_reports([])
        too_many = [UploadedFile(f"{i}.csv", FINANCIAL_CSV) for i in range(settings.MAX_FILES_PER_REQUEST + 1)]
        with self.assertRaises(TooManyFilesError):
            generate_reports(too_many)

    def test_oversized_file_becomes_error_report(self):
        content = b"a\n" + b"1\n" * (settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024)
        report = process_file(UploadedFile("huge.csv", content))
        self.assertEqual(report.report_type, "error")
        self.assertIn("limit", report.data["error"])


class TestReportAPI(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)

    def test_generate_reports(self):
        response = self.client.post(
            "/api/generate-report",
            files=[
                ("files", ("q1.csv", FINANCIAL_CSV, "text/csv")),
                ("files", ("rows.json", json.dumps([{"id": 1, "title": "Dune"}]).encode(), "application/json")),
                ("files", ("bad.txt", b"nope", "text/plain")),
            ],
            data={"report_type": "auto"},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()

        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Successfully processed 3 file(s)")
        self.assertEqual([r["report_type"] for r in body["reports"]], ["financial", "general", "error"])
        self.assertEqual(body["reports"][0]["data"]["headline_metrics"]["total_revenue"], 3000)
        self.assertEqual(body["metadata"]["total_files"], 3)
        self.assertEqual(body["metadata"]["successful_reports"], 2)
        self.assertEqual(body["metadata"]["failed_reports"], 1)
        self.assertIn("timestamp", body["metadata"])

    def test_no_files(self):
        response = self.client.post("/api/generate-report", data={"report_type": "auto"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "No files provided")

    def test_invalid_report_type(self):
        response = self.client.post(
            "/api/generate-report",
            files=[("files", ("q1.csv", FINANCIAL_CSV, "text/csv"))],
            data={"report_type": "weather"},
        )
        self.assertEqual(response.status_code, 400)

    def test_capabilities_and_health(self):
        body = self.client.get("/api/generate-report").json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(set(body["supported_formats"]), {"csv", "xlsx", "xls", "json"})
        self.assertNotIn("error", body["report_types"])
        self.assertEqual(self.client.get("/health").json()["status"], "healthy")


if __name__ == '__main__':
    unittest.main()
