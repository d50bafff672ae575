"""Domain catalog.

The six analysis domains and the 19 indicators they are built from, with the
long-term and short-term chart images that are sent to the assistant.

Usage:
    from cyclescope.domain.catalog import get_domain_config, chart_urls

    macro = get_domain_config("macro")
    urls = chart_urls(macro)
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cyclescope.core.exceptions import InvalidDomainError


LONG_TERM_BASE = "https://cyclescope-dashboard-production.up.railway.app/charts"
SHORT_TERM_BASE = "https://cyclescope-delta-dashboard-production.up.railway.app/charts"


class DomainIndicator(BaseModel):
    """One indicator inside a domain, with its chart references."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Indicator slug, e.g. 'copper_gold'")
    name: str = Field(..., description="Display name")
    symbol: str = Field(..., description="Ticker or ratio symbol")
    role: str = Field(..., description="One-line role of the indicator in the domain")
    long_term_chart_url: str | None = Field(
        None, description="Long-term chart image (absent for VIX)"
    )
    short_term_chart_url: str = Field(..., description="Short-term chart image")


class DomainDefinition(BaseModel):
    """A domain and its ordered indicators."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    description: str
    indicators: tuple[DomainIndicator, ...]


def _indicator(
    id: str,
    name: str,
    symbol: str,
    role: str,
    long_term: str | None,
    short_term: str,
) -> DomainIndicator:
    return DomainIndicator(
        id=id,
        name=name,
        symbol=symbol,
        role=role,
        long_term_chart_url=f"{LONG_TERM_BASE}/{long_term}" if long_term else None,
        short_term_chart_url=f"{SHORT_TERM_BASE}/{short_term}",
    )


# =============================================================================
# DOMAINS
# =============================================================================

MACRO = DomainDefinition(
    code="macro",
    name="Macro",
    description=(
        "Analyzes macroeconomic indicators including equities, commodities, "
        "currencies, and interest rates"
    ),
    indicators=(
        _indicator("spx", "S&P 500", "SPX", "Equity benchmark",
                   "01_SPX_Secular_Trend.png", "15_SPX.png"),
        _indicator("usd", "US Dollar Index", "USD/DXY", "Global financial conditions",
                   "03_US_Dollar_Index.png", "14_USD.png"),
        _indicator("tnx", "10-Year Treasury Yields", "TNX", "Risk-free rate",
                   "04_Treasury_10Y_Yields.png", "19_TNX.png"),
        _indicator("copper_gold", "Copper/Gold Ratio", "COPPER:GOLD", "Growth proxy",
                   "02_Copper_Gold_Ratio.png", "16_COPPER_GOLD.png"),
    ),
)

LEADERSHIP = DomainDefinition(
    code="leadership",
    name="Leadership",
    description="Analyzes market leadership patterns across sectors and styles",
    indicators=(
        _indicator("xly_xlp", "Consumer Discretionary vs Staples", "XLY:XLP",
                   "Risk appetite indicator", "08_XLY_XLP_Ratio.png", "12_XLY_XLP.png"),
        _indicator("xlk_xlp", "Technology vs Staples", "XLK:XLP",
                   "Growth vs defensive", "11_XLK_XLP_Ratio.png", "18_XLK_XLP.png"),
        _indicator("smh_spy", "Semiconductors vs S&P 500", "SMH:SPY",
                   "Tech leadership", "12_SMH_SPY_Ratio.png", "10_SMH_SPY.png"),
        _indicator("iwf_iwd", "Growth vs Value", "IWF:IWD",
                   "Style rotation", "09_IWF_IWD_Ratio.png", "13_IWFIWDV.png"),
    ),
)

BREADTH = DomainDefinition(
    code="breadth",
    name="Breadth",
    description="Analyzes market participation and internal strength",
    indicators=(
        _indicator("rsp_spy", "Equal Weight vs Market Cap", "RSP:SPY",
                   "Broad participation", "10_RSP_SPY_Ratio.png", "09_RSP_SPY.png"),
        _indicator("spxa50r", "S&P 500 % Above 50-day MA", "SPXA50R",
                   "Short-term breadth", "13_SPXA50R.png", "01_SPXA50R.png"),
        _indicator("spxa150r", "S&P 500 % Above 150-day MA", "SPXA150R",
                   "Intermediate breadth", "14_SPXA150R.png", "02_SPXA150R.png"),
        _indicator("spxa200r", "S&P 500 % Above 200-day MA", "SPXA200R",
                   "Long-term breadth", "15_SPXA200R.png", "03_SPXA200R.png"),
    ),
)

LIQUIDITY = DomainDefinition(
    code="liquidity",
    name="Liquidity",
    description="Analyzes credit conditions and financial market liquidity",
    indicators=(
        _indicator("hyg_ief", "High Yield vs Treasury", "HYG:IEF",
                   "Credit risk appetite", "05_HYG_IEF_Ratio.png", "04_HYG_IEF.png"),
        _indicator("jnk_ief", "Junk Bond vs Treasury", "JNK:IEF",
                   "High yield credit", "06_JNK_IEF_Ratio.png", "17_JNK_IEF.png"),
        _indicator("lqd_ief", "Investment Grade vs Treasury", "LQD:IEF",
                   "Investment grade credit", "07_LQD_IEF_Ratio.png", "05_LQD_IEF.png"),
    ),
)

# VIX only has a short-term chart
VOLATILITY = DomainDefinition(
    code="volatility",
    name="Volatility",
    description="Analyzes market volatility and risk sentiment",
    indicators=(
        _indicator("vix_vxv", "VIX Term Structure", "VIX:VXV",
                   "Volatility term structure", "17_VIX_VXV_Ratio.png", "06_VIX_VXV.png"),
        _indicator("vvix", "Volatility of VIX", "VVIX",
                   "Volatility of volatility", "18_VVIX.png", "07_VVIX.png"),
        _indicator("vix", "VIX (Volatility Index)", "VIX",
                   "Market fear gauge", None, "08_VIX.png"),
    ),
)

SENTIMENT = DomainDefinition(
    code="sentiment",
    name="Sentiment",
    description="Analyzes market sentiment and positioning",
    indicators=(
        _indicator("cpce", "Put/Call Ratio", "CPCE", "Options sentiment",
                   "16_CPCE_Put_Call.png", "11_CPCE.png"),
    ),
)

ALL_DOMAINS: tuple[DomainDefinition, ...] = (
    MACRO,
    LEADERSHIP,
    BREADTH,
    LIQUIDITY,
    VOLATILITY,
    SENTIMENT,
)

DOMAIN_CODES: tuple[str, ...] = tuple(d.code for d in ALL_DOMAINS)

_BY_CODE: dict[str, DomainDefinition] = {d.code: d for d in ALL_DOMAINS}


# =============================================================================
# LOOKUPS
# =============================================================================


def get_domain_config(code: str) -> DomainDefinition | None:
    """Get a domain by code (case-insensitive)."""
    return _BY_CODE.get(code.strip().lower())


def get_all_domain_configs() -> tuple[DomainDefinition, ...]:
    """All domains in their fixed order."""
    return ALL_DOMAINS


def is_valid_domain_code(code: str) -> bool:
    return get_domain_config(code) is not None


def require_domain(code: str) -> DomainDefinition:
    """Get a domain by code or raise InvalidDomainError."""
    domain = get_domain_config(code)
    if domain is None:
        raise InvalidDomainError(
            f"Unknown domain code '{code}'",
            details={"valid_codes": list(DOMAIN_CODES)},
        )
    return domain


def get_indicator_config(domain_code: str, indicator_id: str) -> DomainIndicator | None:
    domain = get_domain_config(domain_code)
    if domain is None:
        return None
    return next((i for i in domain.indicators if i.id == indicator_id), None)


def get_all_indicators() -> list[DomainIndicator]:
    return [i for d in ALL_DOMAINS for i in d.indicators]


def get_total_indicator_count() -> int:
    return sum(len(d.indicators) for d in ALL_DOMAINS)


def chart_urls(domain: DomainDefinition) -> list[str]:
    """
    Ordered chart images for a domain.

    For each indicator in catalog order: the long-term chart when there is
    one, followed by the short-term chart.
    """
    urls: list[str] = []
    for indicator in domain.indicators:
        if indicator.long_term_chart_url:
            urls.append(indicator.long_term_chart_url)
        urls.append(indicator.short_term_chart_url)
    return urls


def domain_stats() -> dict[str, Any]:
    """Summary counts for the catalog."""
    return {
        "total_domains": len(ALL_DOMAINS),
        "total_indicators": get_total_indicator_count(),
        "indicators_by_domain": [
            {"domain": d.name, "code": d.code, "count": len(d.indicators)}
            for d in ALL_DOMAINS
        ],
    }
