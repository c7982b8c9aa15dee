# Report Service - Orchestrates per-file report generation and batches
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Union

import structlog

from app.config import settings
from app.core.exceptions import (
    DecodeError,
    EmptyInputError,
    FileTooLargeError,
    InvalidReportTypeError,
    NoFilesProvidedError,
    TooManyFilesError,
    UnsupportedFormatError,
)
from app.models.schemas import (
    AUTO_REPORT_TYPE,
    BatchMetadata,
    DataInfo,
    DomainTag,
    QualityLabel,
    Report,
    ReportMetadata,
)
from app.layers.l1_ingestion.parser import get_file_extension, load_record_set, normalize_records
from app.layers.l1_ingestion.records import RecordSet
from app.layers.l2_classification.domain_classifier import detect_domain
from app.layers.l3_schema_mapping.health import assess_overall_quality, calculate_confidence
from app.layers.l7_analytics.generators.registry import run_generator
from app.layers.l8_rules.engine import ERROR_SUGGESTIONS, generate_suggestions

logger = structlog.get_logger()

PreferredType = Union[DomainTag, str]


@dataclass(frozen=True)
class UploadedFile:
    """Raw bytes of one uploaded file plus its original name."""
    name: str
    content: bytes


def parse_report_type(value: Optional[str]) -> PreferredType:
    """Validate a requested report type: "auto" or any concrete domain."""
    if value is None or value.strip().lower() in ("", AUTO_REPORT_TYPE):
        return AUTO_REPORT_TYPE
    try:
        tag = DomainTag(value.strip().lower())
    except ValueError:
        tag = None
    if tag is None or tag == DomainTag.ERROR:
        valid = [AUTO_REPORT_TYPE] + [t.value for t in DomainTag if t != DomainTag.ERROR]
        raise InvalidReportTypeError(
            f"Invalid report type: {value}. Expected one of: {', '.join(valid)}",
            {"report_type": value}
        )
    return tag


def create_error_report(file_name: str, message: str) -> Report:
    """Error Report for a file that could not be analyzed. No generator runs."""
    return Report(
        file_name=file_name,
        report_type=DomainTag.ERROR,
        data={
            "error": message,
            "executive_summary": f"Failed to process {file_name}: {message}",
        },
        summary={
            "total_records": 0,
            "total_columns": 0,
            "report_type": DomainTag.ERROR.value,
            "key_insights": f"Error processing file: {message}",
        },
        data_info=DataInfo(rows_analyzed=0, columns_analyzed=0),
        metadata=ReportMetadata(
            confidence=0.0,
            processing_time_ms=0,
            data_quality=QualityLabel.POOR,
            suggestions=list(ERROR_SUGGESTIONS),
        ),
    )


def generate_report(
    records: Union[RecordSet, Sequence[Mapping]],
    file_name: str,
    preferred: PreferredType = AUTO_REPORT_TYPE
) -> Report:
    """
    Classify, generate and score a single file's records.

    An empty record set yields the error Report. An unknown preferred type
    raises InvalidReportTypeError. Generator exceptions propagate;
    process_file() is the boundary that absorbs them.
    """
    preferred = parse_report_type(preferred)
    record_set = records if isinstance(records, RecordSet) else normalize_records(records)
    if record_set.is_empty:
        return create_error_report(file_name, EmptyInputError("No data found in file").message)

    start = time.perf_counter()
    if preferred == AUTO_REPORT_TYPE:
        domain = detect_domain(
            record_set.records, record_set.columns,
            sample_rows=settings.CLASSIFIER_SAMPLE_ROWS
        )
    else:
        domain = preferred
    report_type, sections = run_generator(domain, record_set, file_name)
    processing_time_ms = int((time.perf_counter() - start) * 1000)

    return Report(
        file_name=file_name,
        report_type=report_type,
        data=sections,
        summary={
            "total_records": len(record_set),
            "total_columns": len(record_set.columns),
            "report_type": report_type.value,
            "key_insights": sections.get("executive_summary", "Analysis completed"),
        },
        data_info=DataInfo(
            rows_analyzed=len(record_set),
            columns_analyzed=len(record_set.columns),
        ),
        metadata=ReportMetadata(
            confidence=calculate_confidence(record_set.records, record_set.columns, report_type),
            processing_time_ms=processing_time_ms,
            data_quality=assess_overall_quality(record_set.records, record_set.columns),
            suggestions=generate_suggestions(len(record_set), report_type),
        ),
    )


def process_file(file: UploadedFile, preferred: PreferredType = AUTO_REPORT_TYPE) -> Report:
    """Per-file boundary: every failure becomes an error Report."""
    try:
        if len(file.content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
            raise FileTooLargeError(
                f"File exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit",
                {"size": len(file.content)}
            )
        extension = get_file_extension(file.name)
        if extension not in settings.ALLOWED_EXTENSIONS:
            raise UnsupportedFormatError(
                f"Unsupported file format: {extension or 'unknown'}",
                {"file_type": extension}
            )
        record_set = load_record_set(file.content, file.name)
        if record_set.is_empty:
            raise EmptyInputError("No data found in file")
        report = generate_report(record_set, file.name, preferred)
    except (DecodeError, EmptyInputError, InvalidReportTypeError) as e:
        logger.warning("File could not be processed", file_name=file.name, error=e.message)
        return create_error_report(file.name, e.message)
    except Exception as e:
        # Anything else is a defect in the pipeline, not in the file
        logger.exception("Report generation failed", file_name=file.name, error=str(e))
        return create_error_report(file.name, str(e))

    logger.info(
        "Report generated",
        file_name=file.name,
        report_type=report.report_type,
        processing_time_ms=report.metadata.processing_time_ms,
    )
    return report


def generate_reports(
    files: Sequence[UploadedFile],
    preferred: PreferredType = AUTO_REPORT_TYPE,
    max_workers: Optional[int] = None
) -> List[Report]:
    """
    One Report per input file, in input order. Only batch-level problems
    (no files, too many files) raise.
    """
    if not files:
        raise NoFilesProvidedError("No files provided")
    if len(files) > settings.MAX_FILES_PER_REQUEST:
        raise TooManyFilesError(
            f"Too many files: {len(files)} (maximum {settings.MAX_FILES_PER_REQUEST})",
            {"count": len(files)}
        )

    workers = max_workers if max_workers is not None else settings.REPORT_MAX_WORKERS
    logger.info("Generating reports", file_count=len(files), report_type=getattr(preferred, "value", preferred), workers=workers)

    if workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=min(workers, len(files))) as executor:
            return list(executor.map(lambda f: process_file(f, preferred), files))
    return [process_file(f, preferred) for f in files]


def summarize_batch(reports: Sequence[Report], elapsed_ms: int) -> BatchMetadata:
    failed = sum(1 for r in reports if r.report_type == DomainTag.ERROR.value)
    return BatchMetadata(
        total_files=len(reports),
        successful_reports=len(reports) - failed,
        failed_reports=failed,
        total_processing_time_ms=elapsed_ms,
    )
