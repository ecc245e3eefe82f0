"""Exchange kline endpoints for download-ticks."""

from download_ticks.markets.base import BaseMarket
from download_ticks.markets.binance import BinanceMarket
from download_ticks.markets.gate import GateMarket
from download_ticks.models import Market

MARKETS: dict[Market, type[BaseMarket]] = {
    Market.BINANCE: BinanceMarket,
    Market.GATE: GateMarket,
}


def get_market(market: Market | str) -> BaseMarket:
    """Return the endpoint adapter for a market.

    Raises:
        ValueError: If the market is unknown.
    """
    try:
        return MARKETS[Market(market)]()
    except ValueError:
        raise ValueError(
            f"Invalid market: {market}. Must be one of {[m.value for m in Market]}"
        ) from None


__all__ = [
    "BaseMarket",
    "BinanceMarket",
    "GateMarket",
    "MARKETS",
    "get_market",
]
