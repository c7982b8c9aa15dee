# Report Routes - Multi-file report generation and capabilities
import asyncio
import time
from functools import partial
from typing import List, Optional

import structlog
from fastapi import APIRouter, File, Form, UploadFile

from app.config import settings
from app.core.exceptions import (
    InvalidReportTypeError,
    NoFilesProvidedError,
    TooManyFilesError,
    bad_request,
)
from app.models.schemas import (
    AUTO_REPORT_TYPE,
    CapabilitiesResponse,
    DomainTag,
    GenerateReportsResponse,
)
from app.layers.l1_ingestion.parser import SUPPORTED_FORMATS
from app.services.report_service import (
    UploadedFile,
    generate_reports,
    parse_report_type,
    summarize_batch,
)

logger = structlog.get_logger()

router = APIRouter()


@router.post("/generate-report", response_model=GenerateReportsResponse)
async def generate_report_endpoint(
    files: Optional[List[UploadFile]] = File(None),
    report_type: str = Form(AUTO_REPORT_TYPE),
):
    """Generate one report per uploaded file."""
    start = time.perf_counter()

    try:
        preferred = parse_report_type(report_type)
    except InvalidReportTypeError as e:
        raise bad_request(e.message)

    uploads = []
    for upload in files or []:
        content = await upload.read()
        uploads.append(UploadedFile(name=upload.filename or "unnamed", content=content))

    # Parsing and analysis are CPU-bound; keep them off the event loop
    loop = asyncio.get_running_loop()
    try:
        reports = await loop.run_in_executor(None, partial(generate_reports, uploads, preferred))
    except (NoFilesProvidedError, TooManyFilesError) as e:
        logger.warning("Rejected report batch", error=e.message, file_count=len(uploads))
        raise bad_request(e.message)

    elapsed_ms = int((time.perf_counter() - start) * 1000)
    metadata = summarize_batch(reports, elapsed_ms)
    logger.info(
        "Report batch complete",
        total_files=metadata.total_files,
        failed_reports=metadata.failed_reports,
        total_processing_time_ms=elapsed_ms,
    )

    return GenerateReportsResponse(
        message=f"Successfully processed {len(reports)} file(s)",
        reports=reports,
        metadata=metadata,
    )


@router.get("/generate-report", response_model=CapabilitiesResponse)
async def report_capabilities():
    """Static description of what the report generator accepts."""
    return CapabilitiesResponse(
        service=settings.APP_NAME,
        version=settings.APP_VERSION,
        supported_formats=[fmt for fmt in SUPPORTED_FORMATS if fmt in settings.ALLOWED_EXTENSIONS],
        report_types=[t.value for t in DomainTag if t != DomainTag.ERROR],
    )
