"""Security screener package."""

from investment_manager.screener.filter import matches, screen_securities

__all__ = ["matches", "screen_securities"]
