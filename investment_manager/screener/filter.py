"""
Dividend Screener

A pure filter over the security catalog. Results keep catalog order;
the catalog is small and static, so there is no sorting or paging.
"""

from typing import Iterable

from investment_manager.models.finance import (
    FrequencyFilter,
    ScreenFilters,
    Security,
)


def matches(security: Security, filters: ScreenFilters) -> bool:
    """True if a security meets the minimum yield and the frequency choice."""
    meets_yield = security.dividend_yield >= filters.min_yield
    meets_frequency = (
        filters.payout_frequency == FrequencyFilter.ALL
        or security.frequency.value == filters.payout_frequency.value
    )
    return meets_yield and meets_frequency


def screen_securities(
    securities: Iterable[Security],
    filters: ScreenFilters,
) -> list[Security]:
    """Return the securities that pass the filters, in catalog order."""
    return [sec for sec in securities if matches(sec, filters)]
