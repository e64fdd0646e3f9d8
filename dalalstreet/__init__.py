"""Order matching, market depth, leaderboards and trade-graph analysis for a stock-trading game."""

__version__ = "0.1.0"

__all__ = [
    "constants",
    "orders",
    "gamestate",
    "helpers",
    "pqueue",
    "graphs",
    "leaderboard",
    "orderbook",
    "dispatcher",
    "matching_engine",
]