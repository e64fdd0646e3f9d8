"""Overall, end-of-day and daily leaderboards."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Iterable, Sequence

from dalalstreet.constants import LEADERBOARD_COUNT, STARTING_CASH


@dataclass
class LeaderboardEntry:
    """A user's standing on the overall leaderboard."""

    user_id: int
    user_name: str = ""
    cash: int = 0
    debt: int = 0
    stock_worth: int = 0
    total_worth: int = 0
    is_blocked: bool = False
    rank: int = 0


@dataclass
class EndOfDayValue:
    """A user's worth recorded at the close of a market day."""

    user_id: int
    cash: int = 0
    debt: int = 0
    stock_worth: int = 0
    total_worth: int = 0
    id: int = 0


@dataclass
class DailyLeaderboardRow:
    """A user's gains since the last close, with their rank for the day."""

    id: int
    user_id: int
    user_name: str = ""
    rank: int = 0
    cash: int = 0
    debt: int = 0
    stock_worth: int = 0
    total_worth: int = 0
    is_blocked: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


def end_of_day_values(leaderboard: Iterable[LeaderboardEntry]) -> list[EndOfDayValue]:
    """Snapshot the leaderboard as end-of-day values, numbered from 1."""
    return [
        EndOfDayValue(
            id=index,
            user_id=entry.user_id,
            cash=entry.cash,
            debt=entry.debt,
            stock_worth=entry.stock_worth,
            total_worth=entry.total_worth,
        )
        for index, entry in enumerate(leaderboard, 1)
    ]


def compute_daily_leaderboard(
    current: Iterable[LeaderboardEntry], end_of_day: Iterable[EndOfDayValue]
) -> list[DailyLeaderboardRow]:
    """Rank users by how much their worth changed since the last close.

    A user without an end-of-day value is measured against the starting cash.
    Equal totals share a rank and the following rank is skipped.
    """
    snapshots: dict[int, list[EndOfDayValue]] = defaultdict(list)
    for value in end_of_day:
        snapshots[value.user_id].append(value)

    gains = []
    for entry in current:
        for snap in snapshots.get(entry.user_id) or [None]:
            base_cash = snap.cash if snap else STARTING_CASH
            base_stock = snap.stock_worth if snap else 0
            base_total = snap.total_worth if snap else STARTING_CASH
            gains.append(
                (
                    entry,
                    entry.cash - base_cash,
                    entry.stock_worth - base_stock,
                    entry.total_worth - base_total,
                )
            )
    gains.sort(key=lambda g: g[3], reverse=True)

    rows: list[DailyLeaderboardRow] = []
    rank = 1
    for index, (entry, cash, stock_worth, total) in enumerate(gains):
        rows.append(
            DailyLeaderboardRow(
                id=index + 1,
                user_id=entry.user_id,
                user_name=entry.user_name,
                rank=rank,
                cash=cash,
                debt=0,
                stock_worth=stock_worth,
                total_worth=total,
                is_blocked=entry.is_blocked,
            )
        )
        if index + 1 < len(gains) and gains[index + 1][3] < total:
            rank = index + 2
    return rows


def get_daily_leaderboard(
    rows: Sequence[DailyLeaderboardRow], user_id: int, starting_id: int, count: int
) -> tuple[list[DailyLeaderboardRow], DailyLeaderboardRow, int]:
    """A page of the daily leaderboard, the user's own row, and the row count.

    A zero starting_id starts at 1; a zero count means the default page size,
    and larger counts are capped at it. Raises LookupError if the user has no row.
    """
    starting_id = starting_id or 1
    count = LEADERBOARD_COUNT if count == 0 else min(count, LEADERBOARD_COUNT)

    page = sorted((r for r in rows if r.id >= starting_id), key=lambda r: r.rank)[:count]
    mine = next((r for r in rows if r.user_id == user_id), None)
    if mine is None:
        raise LookupError(f"No daily leaderboard row for user {user_id}")
    return page, mine, len(rows)