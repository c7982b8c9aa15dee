# L7: Analytics Layer - Sales Report Generator
import logging
from collections import Counter, defaultdict
from typing import Dict, Any, List, Optional, Sequence, Tuple

from app.models.schemas import DomainTag
from app.layers.l1_ingestion.records import Record, RecordSet, stats_to_dict
from app.layers.l3_schema_mapping.mapper import relevant_columns
from app.layers.l7_analytics.statistics import compute_stats
from app.layers.l7_analytics.generators.common import (
    UPWARD, DOWNWARD, NO_TREND, TrendResult,
    analyze_trend, format_currency, format_number, format_percent,
    hashable_key, safe_ratio, sum_columns,
)
from app.layers.l8_rules.engine import (
    SALES_OPPORTUNITIES, SALES_RECOMMENDATION_RULES, evaluate_rules,
)

logger = logging.getLogger(__name__)

TREND_THRESHOLD = 0.10
TOP_PRODUCTS = 3


def generate_sales_report(record_set: RecordSet, file_name: str) -> Dict[str, Any]:
    """Sales, customer and product sections for a sales dataset."""
    records = record_set.records
    stats = compute_stats(records, record_set.columns)

    roles = relevant_columns(record_set.columns, DomainTag.SALES)
    sales_columns = roles["sales_columns"]
    quantity_columns = roles["quantity_columns"]
    customer_columns = roles["customer_columns"]
    product_columns = roles["product_columns"]

    total_sales = sum_columns(records, sales_columns)
    total_quantity = sum_columns(records, quantity_columns)
    unique_customers = count_unique(records, customer_columns)
    unique_products = count_unique(records, product_columns)
    avg_order_value = total_sales / len(records) if total_sales > 0 and records else 0.0

    avg_customer_value = safe_ratio(total_sales, unique_customers)
    avg_product_price = safe_ratio(total_sales, total_quantity) if unique_products else None
    repeat_rate = repeat_customer_rate(records, customer_columns)
    trend = analyze_trend(records, sales_columns, threshold=TREND_THRESHOLD)

    logger.debug(
        f"Sales totals for {file_name}: sales={total_sales} quantity={total_quantity} "
        f"customers={unique_customers} products={unique_products}"
    )

    return {
        "executive_summary": (
            f"Sales analysis of {file_name} reveals {len(records)} transactions with total sales of "
            f"{format_currency(total_sales)}, {unique_customers} unique customers, "
            f"and {unique_products} unique products."
        ),
        "headline_metrics": {
            "total_sales": total_sales,
            "total_quantity": total_quantity,
            "unique_customers": unique_customers,
            "unique_products": unique_products,
            "avg_order_value": round(avg_order_value, 2),
            "trend_direction": trend.direction,
        },
        "sales_overview": {
            "total_sales": format_currency(total_sales),
            "total_transactions": len(records),
            "avg_order_value": f"${avg_order_value:.2f}",
            "total_quantity": format_number(total_quantity),
        },
        "customer_analysis": {
            "unique_customers": f"{unique_customers:,}",
            "avg_customer_value": f"${avg_customer_value:.2f}" if avg_customer_value is not None else "N/A",
            "repeat_customer_rate": format_percent(repeat_rate) if repeat_rate is not None else "N/A",
        },
        "product_analysis": {
            "unique_products": f"{unique_products:,}",
            "top_products": _describe_top_products(records, product_columns, sales_columns),
            "avg_product_price": f"${avg_product_price:.2f}" if avg_product_price is not None else "N/A",
        },
        "trends": _describe_trend(trend),
        "recommendations": evaluate_rules(
            SALES_RECOMMENDATION_RULES,
            {"trend_direction": trend.direction, "repeat_rate": repeat_rate}
        ),
        "opportunities": list(SALES_OPPORTUNITIES),
        "basic_stats": stats_to_dict(stats),
    }


def count_unique(records: Sequence[Record], columns: Sequence[str]) -> int:
    """Distinct truthy values across the given columns."""
    unique = set()
    for row in records:
        for col in columns:
            value = row.get(col)
            if value:
                unique.add(hashable_key(value))
    return len(unique)


def repeat_customer_rate(records: Sequence[Record], customer_columns: Sequence[str]) -> Optional[float]:
    """Percentage of customers seen more than once, or None if not computable."""
    if not customer_columns:
        return None

    counts: Counter = Counter()
    for row in records:
        for col in customer_columns:
            value = row.get(col)
            if value:
                counts[hashable_key(value)] += 1

    if not counts:
        return None
    repeat_customers = sum(1 for count in counts.values() if count > 1)
    return repeat_customers / len(counts) * 100


def top_products(
    records: Sequence[Record],
    product_columns: Sequence[str],
    sales_columns: Sequence[str],
    limit: int = TOP_PRODUCTS
) -> List[Tuple[Any, float]]:
    """Products ranked by the sales summed over the rows that mention them."""
    product_sales: Dict[Any, float] = defaultdict(float)
    for row in records:
        row_sales = sum_columns([row], sales_columns)
        for col in product_columns:
            product = row.get(col)
            if product:
                product_sales[hashable_key(product)] += row_sales

    ranked = sorted(product_sales.items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit]


def _describe_top_products(
    records: Sequence[Record],
    product_columns: Sequence[str],
    sales_columns: Sequence[str]
) -> str:
    if not product_columns:
        return "Product data not identified"
    ranked = top_products(records, product_columns, sales_columns)
    if not ranked:
        return "Product data not identified"
    return ", ".join(f"{product}: {format_currency(sales)}" for product, sales in ranked)


def _describe_trend(trend: TrendResult) -> str:
    if trend.direction == NO_TREND:
        return "No clear sales trends identifiable"
    if trend.direction == UPWARD:
        return "Strong upward sales trend observed"
    if trend.direction == DOWNWARD:
        return "Declining sales trend requires attention"
    return "Sales performance relatively stable"
