# L1: Ingestion Layer - File Decoder and Record Normalizer
import io
import json
import logging
import math
from datetime import date, datetime
from typing import Dict, Any, List, Iterable, Mapping

import chardet
import numpy as np
import pandas as pd

from app.core.exceptions import ParseFailureError, UnsupportedFormatError
from app.layers.l1_ingestion.records import RecordSet

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("csv", "xlsx", "xls", "json")


def get_file_extension(filename: str) -> str:
    return filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''


def decode(content: bytes, file_type: str) -> List[Dict[str, Any]]:
    """
    Decode raw file bytes into a list of row dictionaries.
    Raises UnsupportedFormatError for unknown types and ParseFailureError
    for content the format reader rejects.
    """
    file_type = (file_type or "").lower().lstrip(".")
    if file_type not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(
            f"Unsupported file format: {file_type or 'unknown'}",
            {"file_type": file_type}
        )

    try:
        if file_type == "csv":
            df = _read_csv(content)
        elif file_type in ["xls", "xlsx"]:
            engine = "openpyxl" if file_type == "xlsx" else "xlrd"
            df = pd.read_excel(io.BytesIO(content), sheet_name=0, engine=engine)
        else:
            df = _read_json(content)
    except pd.errors.EmptyDataError:
        # Header-less, blank file: nothing to analyze
        return []
    except (ParseFailureError, UnsupportedFormatError):
        raise
    except Exception as e:
        logger.warning(f"Failed to parse {file_type} content: {e}")
        raise ParseFailureError(f"Failed to parse file: {e}", {"file_type": file_type}) from e

    df.columns = df.columns.astype(str).str.strip()
    return df.to_dict(orient="records")


def _read_csv(content: bytes) -> pd.DataFrame:
    """Read delimited text after sniffing its encoding."""
    result = chardet.detect(content[:10000])
    encoding = result['encoding'] or 'utf-8'
    return pd.read_csv(io.BytesIO(content), encoding=encoding, skip_blank_lines=True)


def _read_json(content: bytes) -> pd.DataFrame:
    """Accept an array of records, an object wrapping one, or a single record."""
    try:
        data = json.loads(content.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseFailureError(f"Failed to parse file: invalid JSON ({e})") from e

    if isinstance(data, list):
        return pd.DataFrame([row for row in data if isinstance(row, dict)])
    if isinstance(data, dict):
        for value in data.values():
            if isinstance(value, list) and value and isinstance(value[0], dict):
                return pd.DataFrame(value)
        return pd.DataFrame([data])
    raise ParseFailureError("Failed to parse file: unsupported JSON structure")


def normalize_cell(value: Any) -> Any:
    """Convert pandas/NumPy cell values into plain Python scalars."""
    if value is None:
        return None
    if isinstance(value, (pd.Timestamp, datetime, date)):
        if pd.isna(value):
            return None
        return value.isoformat()
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    if value is pd.NA or value is pd.NaT:
        return None
    return value


def normalize_records(rows: Iterable[Mapping[str, Any]]) -> RecordSet:
    """Build a RecordSet from decoded rows, cleaning every cell."""
    cleaned = (
        {str(key).strip(): normalize_cell(value) for key, value in row.items()}
        for row in rows
    )
    return RecordSet.from_rows(cleaned)


def load_record_set(content: bytes, filename: str) -> RecordSet:
    """Decode an uploaded file and normalize it in one step."""
    rows = decode(content, get_file_extension(filename))
    record_set = normalize_records(rows)
    logger.debug(f"Loaded {len(record_set)} records with {len(record_set.columns)} columns from {filename}")
    return record_set
