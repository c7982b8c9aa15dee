# Business Domain Classifier
# Scores column names and sampled rows against fixed keyword vocabularies

import json
import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from app.models.schemas import DomainTag
from app.layers.l1_ingestion.records import Record

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_ROWS = 5


@dataclass(frozen=True)
class DomainVocabulary:
    """Keyword vocabulary for one business domain."""
    domain: DomainTag
    keywords: Tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)

    def matched_keywords(self, text: str) -> List[str]:
        return [keyword for keyword in self.keywords if keyword in text]


# Evaluated in this order; the first vocabulary with any hit wins.
# Financial and sales overlap the most with other domains, so they go first.
DOMAIN_VOCABULARIES: Tuple[DomainVocabulary, ...] = (
    DomainVocabulary(
        domain=DomainTag.FINANCIAL,
        keywords=("revenue", "income", "profit", "loss", "expense", "cost", "balance",
                  "asset", "liability", "equity", "cash", "flow", "budget", "financial"),
    ),
    DomainVocabulary(
        domain=DomainTag.SALES,
        keywords=("sales", "order", "purchase", "transaction", "customer", "product",
                  "quantity", "price", "discount", "commission", "deal", "lead"),
    ),
    DomainVocabulary(
        domain=DomainTag.INVENTORY,
        keywords=("inventory", "stock", "warehouse", "sku", "product", "quantity",
                  "reorder", "supplier", "vendor", "shipment", "item"),
    ),
    DomainVocabulary(
        domain=DomainTag.CUSTOMER,
        keywords=("customer", "client", "user", "demographic", "age", "gender",
                  "location", "segment", "behavior", "retention", "churn"),
    ),
    DomainVocabulary(
        domain=DomainTag.MARKETING,
        keywords=("campaign", "advertisement", "marketing", "impression", "click",
                  "conversion", "roi", "ctr", "engagement", "reach", "audience"),
    ),
    DomainVocabulary(
        domain=DomainTag.OPERATIONAL,
        keywords=("efficiency", "productivity", "performance", "quality", "process",
                  "operation", "throughput", "downtime", "utilization", "metric"),
    ),
)


def build_classification_text(
    records: Sequence[Record],
    columns: Sequence[str],
    sample_rows: int = DEFAULT_SAMPLE_ROWS
) -> str:
    """Lowercased blob of column names plus the serialized leading rows."""
    column_text = " ".join(str(c) for c in columns)
    sample_text = json.dumps(list(records[:sample_rows]), default=str, ensure_ascii=False)
    return f"{column_text} {sample_text}".lower()


def detect_domain(
    records: Sequence[Record],
    columns: Sequence[str],
    sample_rows: int = DEFAULT_SAMPLE_ROWS
) -> DomainTag:
    """
    Return the first domain, in priority order, whose vocabulary appears
    anywhere in the classification text. Falls back to GENERAL.
    """
    text = build_classification_text(records, columns, sample_rows)

    for vocabulary in DOMAIN_VOCABULARIES:
        if vocabulary.matches(text):
            logger.debug(f"Detected domain {vocabulary.domain.value}: {vocabulary.matched_keywords(text)}")
            return vocabulary.domain

    return DomainTag.GENERAL
