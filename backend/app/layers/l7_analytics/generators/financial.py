# L7: Analytics Layer - Financial Report Generator
import logging
from typing import Dict, Any, Sequence

from app.models.schemas import DomainTag
from app.layers.l1_ingestion.records import Record, RecordSet, stats_to_dict
from app.layers.l3_schema_mapping.mapper import relevant_columns
from app.layers.l3_schema_mapping.health import assess_financial_risk
from app.layers.l7_analytics.statistics import compute_stats
from app.layers.l7_analytics.generators.common import (
    UPWARD, DOWNWARD, NO_TREND,
    analyze_trend, format_currency, format_percent, join_or, sum_columns,
)
from app.layers.l8_rules.engine import (
    FINANCIAL_OPPORTUNITIES, FINANCIAL_RECOMMENDATION_RULES, evaluate_rules,
)

logger = logging.getLogger(__name__)


def generate_financial_report(record_set: RecordSet, file_name: str) -> Dict[str, Any]:
    """Revenue, cost and profit sections for a financial dataset."""
    records = record_set.records
    stats = compute_stats(records, record_set.columns)

    roles = relevant_columns(record_set.columns, DomainTag.FINANCIAL)
    revenue_columns = roles["revenue_columns"]
    expense_columns = roles["expense_columns"]
    profit_columns = roles["profit_columns"]

    total_revenue = sum_columns(records, revenue_columns)
    total_expenses = sum_columns(records, expense_columns)
    net_profit = total_revenue - total_expenses
    profit_margin = (net_profit / total_revenue * 100) if total_revenue > 0 else 0.0

    logger.debug(
        f"Financial totals for {file_name}: revenue={total_revenue} "
        f"expenses={total_expenses} margin={profit_margin:.2f}"
    )

    return {
        "executive_summary": _executive_summary(file_name, total_revenue, total_expenses, net_profit),
        "headline_metrics": {
            "total_revenue": total_revenue,
            "total_expenses": total_expenses,
            "net_profit": net_profit,
            "profit_margin": round(profit_margin, 2),
        },
        "revenue_analysis": {
            "total_revenue": format_currency(total_revenue),
            "breakdown": (
                f"Revenue sources: {', '.join(revenue_columns)}"
                if revenue_columns else "Revenue sources not clearly identified"
            ),
            "trends": _describe_trend(records, revenue_columns, "revenue"),
        },
        "cost_analysis": {
            "total_costs": format_currency(total_expenses),
            "major_categories": join_or(expense_columns, "Expense categories not clearly identified"),
            "trends": _describe_trend(records, expense_columns, "expenses"),
        },
        "profit_loss": {
            "net_profit": format_currency(net_profit),
            "profit_margin": format_percent(profit_margin, 2),
            "comparison": _profit_comparison(net_profit),
            "profit_columns": join_or(profit_columns, "Profit columns not clearly identified"),
        },
        "key_metrics": {
            "gross_margin": format_percent(profit_margin, 2),
            "total_transactions": len(records),
            "avg_transaction_value": (
                f"${total_revenue / len(records):.2f}"
                if total_revenue > 0 and records else "N/A"
            ),
        },
        "recommendations": evaluate_rules(
            FINANCIAL_RECOMMENDATION_RULES,
            {"margin": profit_margin, "revenue": total_revenue, "expenses": total_expenses}
        ),
        "risk_factors": assess_financial_risk(profit_margin, len(records)),
        "opportunities": list(FINANCIAL_OPPORTUNITIES),
        "basic_stats": stats_to_dict(stats),
    }


def _executive_summary(file_name: str, revenue: float, expenses: float, net_profit: float) -> str:
    revenue_text = (
        f"total revenue of {format_currency(revenue)}"
        if revenue > 0 else "revenue data not clearly identified"
    )
    expense_text = (
        f"expenses of {format_currency(expenses)}"
        if expenses > 0 else "expense data not clearly identified"
    )
    profit_text = (
        f"net profit of {format_currency(net_profit)}"
        if net_profit != 0 else "profit calculation requires revenue and expense identification"
    )
    return f"Financial analysis of {file_name} shows {revenue_text}, {expense_text}, and {profit_text}."


def _describe_trend(records: Sequence[Record], columns: Sequence[str], label: str) -> str:
    trend = analyze_trend(records, columns)
    if trend.direction == NO_TREND:
        return f"No clear {label} trends identifiable"
    if trend.direction == UPWARD:
        return f"{label} showing upward trend in recent period"
    if trend.direction == DOWNWARD:
        return f"{label} showing downward trend in recent period"
    return f"{label} remaining relatively stable"


def _profit_comparison(net_profit: float) -> str:
    if net_profit > 0:
        return "Profitable operations"
    if net_profit < 0:
        return "Operating at a loss"
    return "Break-even performance"
