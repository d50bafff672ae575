"""Domain catalog: the six analysis domains and their indicators.

Usage:
    from cyclescope.domain import DOMAIN_CODES, get_domain_config
"""

from cyclescope.domain.catalog import (
    ALL_DOMAINS,
    DOMAIN_CODES,
    DomainDefinition,
    DomainIndicator,
    chart_urls,
    domain_stats,
    get_all_domain_configs,
    get_all_indicators,
    get_domain_config,
    get_indicator_config,
    get_total_indicator_count,
    is_valid_domain_code,
    require_domain,
)


__all__ = [
    "ALL_DOMAINS",
    "DOMAIN_CODES",
    "DomainDefinition",
    "DomainIndicator",
    "chart_urls",
    "domain_stats",
    "get_all_domain_configs",
    "get_all_indicators",
    "get_domain_config",
    "get_indicator_config",
    "get_total_indicator_count",
    "is_valid_domain_code",
    "require_domain",
]
