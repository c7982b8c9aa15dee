# L7: Analytics Layer - Generator Routing
from typing import Callable, Dict, Any, Tuple

from app.models.schemas import DomainTag
from app.layers.l1_ingestion.records import RecordSet
from app.layers.l7_analytics.generators.financial import generate_financial_report
from app.layers.l7_analytics.generators.sales import generate_sales_report
from app.layers.l7_analytics.generators.general import generate_general_report

SectionMap = Dict[str, Any]
Generator = Callable[[RecordSet, str], SectionMap]

# Domains without a generator of their own are reported generically.
# Add an entry to GENERATORS and drop the route here to give one a dedicated report.
GENERATOR_ROUTES: Dict[DomainTag, DomainTag] = {
    DomainTag.INVENTORY: DomainTag.GENERAL,
    DomainTag.CUSTOMER: DomainTag.GENERAL,
    DomainTag.MARKETING: DomainTag.GENERAL,
    DomainTag.OPERATIONAL: DomainTag.GENERAL,
}

GENERATORS: Dict[DomainTag, Generator] = {
    DomainTag.FINANCIAL: generate_financial_report,
    DomainTag.SALES: generate_sales_report,
    DomainTag.GENERAL: generate_general_report,
}


def resolve_report_type(domain: DomainTag) -> DomainTag:
    """Report type actually produced for a classified domain."""
    return GENERATOR_ROUTES.get(domain, domain)


def run_generator(domain: DomainTag, record_set: RecordSet, file_name: str) -> Tuple[DomainTag, SectionMap]:
    """Run the generator for a domain, returning the routed report type and its sections."""
    report_type = resolve_report_type(domain)
    if report_type not in GENERATORS:
        raise ValueError(f"No report generator for domain: {domain.value}")

    if report_type == DomainTag.GENERAL:
        return report_type, generate_general_report(record_set, file_name, detected_domain=domain)
    return report_type, GENERATORS[report_type](record_set, file_name)
