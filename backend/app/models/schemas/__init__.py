from app.models.schemas.schemas import (
    AUTO_REPORT_TYPE,
    BatchMetadata,
    CapabilitiesResponse,
    DataInfo,
    DomainTag,
    GenerateReportsResponse,
    QualityLabel,
    Report,
    ReportMetadata,
)

__all__ = [
    "AUTO_REPORT_TYPE",
    "BatchMetadata",
    "CapabilitiesResponse",
    "DataInfo",
    "DomainTag",
    "GenerateReportsResponse",
    "QualityLabel",
    "Report",
    "ReportMetadata",
]
