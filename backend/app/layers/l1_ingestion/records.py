# L1: Ingestion Layer - Record containers
from dataclasses import dataclass, field
from typing import Dict, Any, Tuple, Iterable, Mapping


Record = Dict[str, Any]


@dataclass(frozen=True)
class RecordSet:
    """One file's parsed rows plus the first-seen union of their keys."""
    records: Tuple[Record, ...] = field(default_factory=tuple)
    columns: Tuple[str, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return len(self.records) == 0

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]]) -> "RecordSet":
        records = []
        columns: Dict[str, None] = {}
        for row in rows:
            record = dict(row)
            for key in record:
                columns.setdefault(key, None)
            records.append(record)
        return cls(records=tuple(records), columns=tuple(columns))


@dataclass(frozen=True)
class ColumnStats:
    """Aggregates over the numerically-coercible values of one column."""
    sum: float
    average: float
    min: float
    max: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sum": self.sum,
            "average": self.average,
            "min": self.min,
            "max": self.max,
            "count": self.count,
        }


def stats_to_dict(stats: Mapping[str, ColumnStats]) -> Dict[str, Dict[str, Any]]:
    """Plain-dict copy of a stats mapping, for embedding in report sections."""
    return {column: col_stats.to_dict() for column, col_stats in stats.items()}
