# L3: Schema Mapping Layer - Confidence and Quality Scoring
# Deterministic heuristics; nothing here is a learned or random score.
from typing import List, Sequence

from app.models.schemas import DomainTag, QualityLabel
from app.layers.l1_ingestion.records import Record
from app.layers.l3_schema_mapping.mapper import confidence_columns
from app.layers.l7_analytics.coercion import is_missing
from app.layers.l8_rules.engine import FINANCIAL_RISK_RULES, evaluate_rules

BASE_CONFIDENCE = 0.5
VOLUME_BONUS = 0.2       # > 100 records
LARGE_VOLUME_BONUS = 0.1  # > 1000 records
RELEVANCE_WEIGHT = 0.3

# Completeness floor for each label, best first
QUALITY_THRESHOLDS = (
    (0.9, QualityLabel.EXCELLENT),
    (0.7, QualityLabel.GOOD),
    (0.5, QualityLabel.FAIR),
)


def calculate_confidence(
    records: Sequence[Record],
    columns: Sequence[str],
    report_type: DomainTag
) -> float:
    """
    Confidence in [0, 1] from data volume and the share of columns that
    support the report type.
    """
    confidence = BASE_CONFIDENCE

    if len(records) > 100:
        confidence += VOLUME_BONUS
    if len(records) > 1000:
        confidence += LARGE_VOLUME_BONUS

    relevant = confidence_columns(columns, report_type)
    if relevant and columns:
        confidence += (len(relevant) / len(columns)) * RELEVANCE_WEIGHT

    return max(0.0, min(confidence, 1.0))


def count_missing_cells(records: Sequence[Record], columns: Sequence[str]) -> int:
    return sum(1 for row in records for col in columns if is_missing(row.get(col)))


def calculate_completeness(records: Sequence[Record], columns: Sequence[str]) -> float:
    """Filled cells over total cells; 0 when there are no cells."""
    total_cells = len(records) * len(columns)
    if total_cells == 0:
        return 0.0
    return (total_cells - count_missing_cells(records, columns)) / total_cells


def assess_overall_quality(records: Sequence[Record], columns: Sequence[str]) -> QualityLabel:
    """Headline quality label from overall completeness."""
    if not records or not columns:
        return QualityLabel.POOR

    completeness = calculate_completeness(records, columns)
    for floor, label in QUALITY_THRESHOLDS:
        if completeness >= floor:
            return label
    return QualityLabel.POOR


def assess_financial_risk(profit_margin: float, record_count: int) -> List[str]:
    """
    Margin and sample-size risk heuristic used by the financial report.
    Independent of assess_overall_quality; the two are not expected to agree.
    """
    return evaluate_rules(
        FINANCIAL_RISK_RULES,
        {"margin": profit_margin, "record_count": record_count}
    )
