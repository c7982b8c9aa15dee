# L3: Schema Mapping Layer - Column Relevance Matcher
import re
from typing import Dict, List, Sequence, Pattern

from app.models.schemas import DomainTag


def _compile(pattern: str) -> Pattern:
    return re.compile(pattern, re.IGNORECASE)


# Role tables per domain. A column may fill several roles at once.
ROLE_PATTERNS: Dict[DomainTag, Dict[str, Pattern]] = {
    DomainTag.FINANCIAL: {
        "revenue_columns": _compile(r"revenue|income|sales|earnings"),
        "expense_columns": _compile(r"expense|cost|expenditure|spend"),
        "profit_columns": _compile(r"profit|net|margin"),
    },
    DomainTag.SALES: {
        "sales_columns": _compile(r"sales|revenue|amount|total|price"),
        "quantity_columns": _compile(r"quantity|qty|units|count"),
        "customer_columns": _compile(r"customer|client|user|buyer"),
        "product_columns": _compile(r"product|item|sku|name"),
    },
    DomainTag.INVENTORY: {
        "stock_columns": _compile(r"stock|inventory|on_?hand"),
        "sku_columns": _compile(r"sku|item|product"),
        "supplier_columns": _compile(r"supplier|vendor"),
        "shipment_columns": _compile(r"shipment|delivery|reorder|warehouse"),
    },
    DomainTag.CUSTOMER: {
        "customer_id_columns": _compile(r"customer|client|user|account"),
        "demographic_columns": _compile(r"age|gender|location|region|segment"),
        "retention_columns": _compile(r"retention|churn|tenure|lifetime"),
    },
    DomainTag.MARKETING: {
        "campaign_columns": _compile(r"campaign|channel|advert"),
        "engagement_columns": _compile(r"impression|click|ctr|reach|engagement"),
        "conversion_columns": _compile(r"conversion|lead|signup|roi"),
        "spend_columns": _compile(r"spend|budget|cpc|cost"),
    },
    DomainTag.OPERATIONAL: {
        "efficiency_columns": _compile(r"efficiency|productivity|throughput|utilization"),
        "downtime_columns": _compile(r"downtime|outage|delay|defect"),
        "performance_columns": _compile(r"performance|quality|metric|score"),
    },
}

# Columns that count toward classification confidence. Only the domains
# with a dedicated generator have one; everything else earns no credit.
CONFIDENCE_PATTERNS: Dict[DomainTag, Pattern] = {
    DomainTag.FINANCIAL: _compile(r"revenue|income|profit|expense|cost|balance|asset|liability"),
    DomainTag.SALES: _compile(r"sales|order|purchase|customer|product|quantity|price"),
}


def relevant_columns(columns: Sequence[str], domain: DomainTag) -> Dict[str, List[str]]:
    """
    Map each role of *domain* to the columns whose names match it.
    Unmatched roles map to an empty list, meaning the data is not identifiable.
    """
    roles = ROLE_PATTERNS.get(domain, {})
    return {
        role: [col for col in columns if pattern.search(str(col))]
        for role, pattern in roles.items()
    }


def confidence_columns(columns: Sequence[str], domain: DomainTag) -> List[str]:
    """Columns that support the domain for confidence scoring."""
    pattern = CONFIDENCE_PATTERNS.get(domain)
    if pattern is None:
        return []
    return [col for col in columns if pattern.search(str(col))]
