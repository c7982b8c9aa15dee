# L8: Rule Engine - Recommendations, Risks and Suggestions
from typing import Dict, Any, List, Callable, Sequence
from dataclasses import dataclass

from app.models.schemas import DomainTag


@dataclass(frozen=True)
class Rule:
    """Report rule definition."""
    id: str
    name: str
    severity: str  # critical, high, medium, low, info, opportunity
    condition: Callable[[Dict[str, Any]], bool]
    message: str


def _always(context: Dict[str, Any]) -> bool:
    return True


# Financial recommendations. Context: margin, revenue, expenses
FINANCIAL_RECOMMENDATION_RULES: List[Rule] = [
    Rule(
        id="FIN_REC_001",
        name="Thin Margin",
        severity="high",
        condition=lambda c: c["margin"] < 10,
        message="Focus on cost reduction strategies to improve profit margins",
    ),
    Rule(
        id="FIN_REC_002",
        name="No Revenue Identified",
        severity="medium",
        condition=lambda c: c["revenue"] == 0,
        message="Implement revenue tracking and categorization",
    ),
    Rule(
        id="FIN_REC_003",
        name="Expenses Exceed Revenue",
        severity="critical",
        condition=lambda c: c["expenses"] > c["revenue"],
        message="Urgent review of expense management required",
    ),
    Rule(
        id="FIN_REC_004",
        name="Reporting Cadence",
        severity="info",
        condition=_always,
        message="Establish regular financial reporting cadence",
    ),
    Rule(
        id="FIN_REC_005",
        name="Budgeting",
        severity="info",
        condition=_always,
        message="Consider implementing budgeting and forecasting processes",
    ),
]

# Financial risks. Context: margin, record_count
FINANCIAL_RISK_RULES: List[Rule] = [
    Rule(
        id="FIN_RISK_001",
        name="Operating Loss",
        severity="critical",
        condition=lambda c: c["margin"] < 0,
        message="Operating losses pose sustainability risk",
    ),
    Rule(
        id="FIN_RISK_002",
        name="Low Margin",
        severity="high",
        condition=lambda c: c["margin"] < 5,
        message="Low profit margins indicate financial vulnerability",
    ),
    Rule(
        id="FIN_RISK_003",
        name="Small Sample",
        severity="medium",
        condition=lambda c: c["record_count"] < 10,
        message="Limited data sample may not represent full financial picture",
    ),
]

FINANCIAL_OPPORTUNITIES: List[str] = [
    "Analyze high-performing revenue streams for scaling opportunities",
    "Implement cost optimization in largest expense categories",
    "Develop predictive financial modeling capabilities",
]

# Sales recommendations. Context: trend_direction, repeat_rate (None when unknown)
SALES_RECOMMENDATION_RULES: List[Rule] = [
    Rule(
        id="SALES_REC_001",
        name="Segmentation",
        severity="info",
        condition=_always,
        message="Implement customer segmentation for targeted marketing",
    ),
    Rule(
        id="SALES_REC_002",
        name="Seasonality",
        severity="info",
        condition=_always,
        message="Analyze seasonal patterns for inventory planning",
    ),
    Rule(
        id="SALES_REC_003",
        name="Loyalty",
        severity="info",
        condition=_always,
        message="Develop loyalty programs to increase repeat purchases",
    ),
    Rule(
        id="SALES_REC_004",
        name="Margin Mix",
        severity="info",
        condition=_always,
        message="Focus on high-margin products for revenue optimization",
    ),
    Rule(
        id="SALES_REC_005",
        name="Declining Sales",
        severity="high",
        condition=lambda c: c["trend_direction"] == "downward",
        message="Investigate drivers behind the decline in recent sales",
    ),
    Rule(
        id="SALES_REC_006",
        name="Low Repeat Rate",
        severity="medium",
        condition=lambda c: c["repeat_rate"] is not None and c["repeat_rate"] < 20,
        message="Prioritize retention campaigns to lift a low repeat customer rate",
    ),
]

SALES_OPPORTUNITIES: List[str] = [
    "Focus on high-value customer segments",
    "Optimize product mix based on performance",
    "Implement upselling strategies for top customers",
]

GENERAL_RECOMMENDATIONS: List[str] = [
    "Consider data standardization for better analysis",
    "Implement data validation rules",
    "Add meaningful column descriptions",
    "Regular data quality assessments recommended",
]

# Report metadata suggestions. Context: record_count, report_type
SUGGESTION_RULES: List[Rule] = [
    Rule(
        id="SUG_001",
        name="Small Dataset",
        severity="info",
        condition=lambda c: c["record_count"] < 50,
        message="Consider collecting more data for better analysis accuracy",
    ),
    Rule(
        id="SUG_FIN_001",
        name="Time Series",
        severity="info",
        condition=lambda c: c["report_type"] == DomainTag.FINANCIAL,
        message="Add date columns for time-series analysis",
    ),
    Rule(
        id="SUG_FIN_002",
        name="Budget Comparison",
        severity="info",
        condition=lambda c: c["report_type"] == DomainTag.FINANCIAL,
        message="Include budget vs actual comparisons",
    ),
    Rule(
        id="SUG_SALES_001",
        name="Acquisition Cost",
        severity="info",
        condition=lambda c: c["report_type"] == DomainTag.SALES,
        message="Include customer acquisition cost data",
    ),
    Rule(
        id="SUG_SALES_002",
        name="Seasonality",
        severity="info",
        condition=lambda c: c["report_type"] == DomainTag.SALES,
        message="Add seasonal trend indicators",
    ),
    Rule(
        id="SUG_GEN_001",
        name="Metadata",
        severity="info",
        condition=lambda c: c["report_type"] not in (DomainTag.FINANCIAL, DomainTag.SALES),
        message="Consider adding metadata for better categorization",
    ),
    Rule(
        id="SUG_GEN_002",
        name="Validation",
        severity="info",
        condition=lambda c: c["report_type"] not in (DomainTag.FINANCIAL, DomainTag.SALES),
        message="Implement data validation rules",
    ),
]

ERROR_SUGGESTIONS: List[str] = [
    "Fix data format issues",
    "Ensure file is not corrupted",
]


def evaluate_rules(rules: Sequence[Rule], context: Dict[str, Any]) -> List[str]:
    """Messages of every rule whose condition holds, in rule order."""
    return [rule.message for rule in rules if rule.condition(context)]


def generate_suggestions(record_count: int, report_type: DomainTag) -> List[str]:
    """Metadata suggestions for a finished report."""
    return evaluate_rules(
        SUGGESTION_RULES,
        {"record_count": record_count, "report_type": report_type}
    )
