# Pydantic Schemas for Reports and API Responses
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Dict, Any
from datetime import datetime, timezone
from uuid import uuid4
from enum import Enum


# Enums
class DomainTag(str, Enum):
    FINANCIAL = "financial"
    SALES = "sales"
    INVENTORY = "inventory"
    CUSTOMER = "customer"
    MARKETING = "marketing"
    OPERATIONAL = "operational"
    GENERAL = "general"
    ERROR = "error"


class QualityLabel(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


AUTO_REPORT_TYPE = "auto"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# Report schemas
class ReportMetadata(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    confidence: float = Field(ge=0.0, le=1.0)
    processing_time_ms: int = 0
    data_quality: QualityLabel
    suggestions: List[str] = Field(default_factory=list)


class DataInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    rows_analyzed: int
    columns_analyzed: int


class Report(BaseModel):
    """Terminal artifact produced once per input file."""
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    file_name: str
    generated_at: str = Field(default_factory=_utc_now_iso)
    report_type: DomainTag
    data: Dict[str, Any]
    summary: Dict[str, Any]
    data_info: DataInfo
    metadata: ReportMetadata


# Batch response schemas
class BatchMetadata(BaseModel):
    total_files: int
    successful_reports: int
    failed_reports: int
    total_processing_time_ms: int
    timestamp: str = Field(default_factory=_utc_now_iso)


class GenerateReportsResponse(BaseModel):
    success: bool = True
    message: str
    reports: List[Report]
    metadata: BatchMetadata


class CapabilitiesResponse(BaseModel):
    status: str = "healthy"
    service: str
    version: str
    supported_formats: List[str]
    report_types: List[str]
    timestamp: str = Field(default_factory=_utc_now_iso)
