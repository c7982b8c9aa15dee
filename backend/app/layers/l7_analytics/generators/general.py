# L7: Analytics Layer - General Report Generator
# Fallback for every dataset without a dedicated domain generator.
import json
import logging
import re
from typing import Dict, Any, List, Optional, Sequence

import pandas as pd

from app.models.schemas import DomainTag
from app.layers.l1_ingestion.records import ColumnStats, Record, RecordSet, stats_to_dict
from app.layers.l3_schema_mapping.health import calculate_completeness, count_missing_cells
from app.layers.l3_schema_mapping.mapper import relevant_columns
from app.layers.l7_analytics.coercion import is_missing, is_number, to_number
from app.layers.l7_analytics.statistics import compute_stats
from app.layers.l7_analytics.generators.common import format_percent, hashable_key
from app.layers.l8_rules.engine import GENERAL_RECOMMENDATIONS

logger = logging.getLogger(__name__)

DATE_PATTERNS = [
    re.compile(r'\d{4}-\d{2}-\d{2}'),
    re.compile(r'\d{2}/\d{2}/\d{4}'),
    re.compile(r'\d{2}-\d{2}-\d{4}'),
    re.compile(r'\d{1,2}/\d{1,2}/\d{2,4}$'),
]


def generate_general_report(
    record_set: RecordSet,
    file_name: str,
    detected_domain: Optional[DomainTag] = None
) -> Dict[str, Any]:
    """
    Structure, completeness and quality sections for any dataset.
    When the classifier chose a domain that has no generator of its own,
    that domain and its column roles are attached to the sections.
    """
    records = record_set.records
    columns = record_set.columns
    stats = compute_stats(records, columns)
    data_types = identify_data_types(records)
    completeness = _completeness_text(records, columns)

    sections: Dict[str, Any] = {
        "executive_summary": (
            f"General analysis of {file_name} containing {len(records)} records across "
            f"{len(columns)} columns. Data types include {', '.join(data_types)}."
        ),
        "data_overview": {
            "total_records": len(records),
            "total_columns": len(columns),
            "data_types": data_types,
            "completeness": completeness,
        },
        "column_analysis": analyze_columns(records, columns, stats),
        "data_quality": assess_data_quality(records, columns),
        "insights": _general_insights(records, columns, stats, completeness),
        "recommendations": list(GENERAL_RECOMMENDATIONS),
        "basic_stats": stats_to_dict(stats),
    }

    if detected_domain is not None and detected_domain != DomainTag.GENERAL:
        # Domain recognised but reported generically until it gets its own generator
        sections["detected_domain"] = detected_domain.value
        sections["domain_columns"] = relevant_columns(columns, detected_domain)
        logger.info(f"{file_name} classified as {detected_domain.value}; using general report")

    return sections


def looks_like_date(value: str) -> bool:
    """Date-shaped string that pandas can actually parse."""
    if not any(p.match(value.strip()) for p in DATE_PATTERNS):
        return False
    return not pd.isna(pd.to_datetime(value, errors='coerce'))


def infer_value_type(value: Any) -> str:
    """Classify a single cell: date check first, then numeric, then text."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "numeric"
    if isinstance(value, str):
        if looks_like_date(value):
            return "date"
        if is_number(to_number(value)):
            return "numeric"
    return "text"


def identify_data_types(records: Sequence[Record]) -> List[str]:
    """Distinct value types present in the first record, in column order."""
    if not records:
        return []
    types: Dict[str, None] = {}
    for value in records[0].values():
        if is_missing(value):
            continue
        types.setdefault(infer_value_type(value), None)
    return list(types)


def infer_column_type(values: Sequence[Any]) -> str:
    """Type of a column judged by its first non-empty value."""
    if not values:
        return "empty"
    return infer_value_type(values[0])


def analyze_columns(
    records: Sequence[Record],
    columns: Sequence[str],
    stats: Dict[str, ColumnStats]
) -> Dict[str, Dict[str, Any]]:
    analysis: Dict[str, Dict[str, Any]] = {}
    for column in columns:
        values = [row.get(column) for row in records if not is_missing(row.get(column))]
        col_stats = stats.get(column)
        analysis[column] = {
            "data_type": infer_column_type(values),
            "completeness": format_percent(len(values) / len(records) * 100) if records else "0.0%",
            "unique_values": len({(type(v).__name__, hashable_key(v)) for v in values}),
            "statistics": col_stats.to_dict() if col_stats else None,
        }
    return analysis


def count_duplicate_rows(records: Sequence[Record]) -> int:
    """Rows structurally identical to an earlier row, key order ignored."""
    seen = set()
    duplicates = 0
    for row in records:
        key = json.dumps(row, sort_keys=True, default=str)
        if key in seen:
            duplicates += 1
        else:
            seen.add(key)
    return duplicates


def assess_data_quality(records: Sequence[Record], columns: Sequence[str]) -> Dict[str, Any]:
    """Missing-value rate bands, separate from the headline quality label."""
    total_cells = len(records) * len(columns)
    missing = count_missing_cells(records, columns)
    missing_rate = missing / total_cells if total_cells else 0.0

    if total_cells == 0:
        overall = "Poor"
    elif missing_rate < 0.1:
        overall = "Good"
    elif missing_rate < 0.3:
        overall = "Fair"
    else:
        overall = "Poor"

    return {
        "missing_value_rate": format_percent(missing_rate * 100),
        "duplicate_rows": count_duplicate_rows(records),
        "overall_quality": overall,
    }


def _completeness_text(records: Sequence[Record], columns: Sequence[str]) -> str:
    return format_percent(calculate_completeness(records, columns) * 100)


def _general_insights(
    records: Sequence[Record],
    columns: Sequence[str],
    stats: Dict[str, ColumnStats],
    completeness: str
) -> List[str]:
    insights = [f"Dataset contains {len(records)} records with {len(columns)} attributes"]
    if stats:
        insights.append(f"{len(stats)} numeric columns identified for statistical analysis")
    insights.append(f"Data completeness: {completeness}")
    return insights
