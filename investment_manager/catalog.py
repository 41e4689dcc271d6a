"""
Static sample catalog of high-yield dividend securities.

There is no market-data integration: these figures are a fixed
fixture used by the screener and for creating new holdings.
"""

from typing import Optional

from investment_manager.models.finance import PayoutFrequency, Security


SAMPLE_SECURITIES: tuple[Security, ...] = (
    Security(ticker="QYLD", name="Global X NASDAQ Covered Call ETF",
             dividend_yield="52.3", price="17.85",
             frequency=PayoutFrequency.MONTHLY, sector="ETF"),
    Security(ticker="XYLD", name="Global X S&P 500 Covered Call ETF",
             dividend_yield="51.8", price="42.15",
             frequency=PayoutFrequency.MONTHLY, sector="ETF"),
    Security(ticker="RYLD", name="Global X Russell 2000 Covered Call",
             dividend_yield="53.2", price="38.90",
             frequency=PayoutFrequency.MONTHLY, sector="ETF"),
    Security(ticker="JEPI", name="JPMorgan Equity Premium Income",
             dividend_yield="50.4", price="55.20",
             frequency=PayoutFrequency.MONTHLY, sector="ETF"),
    Security(ticker="DIVO", name="Amplify CWP Enhanced Dividend",
             dividend_yield="52.1", price="28.45",
             frequency=PayoutFrequency.QUARTERLY, sector="ETF"),
    Security(ticker="SVOL", name="Simplify Volatility Premium ETF",
             dividend_yield="68.5", price="31.20",
             frequency=PayoutFrequency.MONTHLY, sector="ETF"),
    Security(ticker="ULTY", name="YieldMax Ultra Option Income",
             dividend_yield="71.2", price="18.95",
             frequency=PayoutFrequency.MONTHLY, sector="ETF"),
)


def get_security(
    ticker: str,
    securities: tuple[Security, ...] = SAMPLE_SECURITIES,
) -> Optional[Security]:
    """Look up a catalog entry by ticker (case-insensitive)."""
    wanted = ticker.strip().upper()
    for security in securities:
        if security.ticker.upper() == wanted:
            return security
    return None
