"""Trade-graph analysis used to inspect clusters of users trading with each other."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Sequence


@dataclass(frozen=True)
class TradeEdge:
    """Money flowing from a buying user to a selling user in one trade."""

    from_id: int
    to_id: int
    volume: int


@dataclass
class ComponentResult:
    """A cluster of users and the trade volume exchanged inside it."""

    members: list[int] = field(default_factory=list)
    volume: int = 0

    def to_dict(self) -> dict:
        return {"members": list(self.members), "volume": self.volume}


@dataclass
class DegreeDetails:
    """Per-user volume traded with users who have a single trading partner.

    position ranks users by that volume, 1 being the largest.
    """

    volume: dict[int, int] = field(default_factory=dict)
    position: dict[int, int] = field(default_factory=dict)


def _weights(
    user_ids: Sequence[int], edges: Iterable[TradeEdge]
) -> dict[tuple[int, int], int]:
    """Edge weights between user numbers (1-based positions in user_ids).

    Trades involving users not in user_ids are ignored.
    """
    number_of = {uid: n for n, uid in enumerate(user_ids, 1)}
    weights: dict[tuple[int, int], int] = defaultdict(int)
    for edge in edges:
        a = number_of.get(edge.from_id)
        b = number_of.get(edge.to_id)
        if a is None or b is None:
            continue
        weights[(a, b)] += edge.volume
    return weights


def _dfs_pass(start: int, adjacency: dict[int, list[int]], visited: set[int]):
    """Iterative depth-first walk yielding (node, newly_visited) for every pop."""
    stack = [start]
    while stack:
        top = stack.pop()
        fresh = top not in visited
        if fresh:
            visited.add(top)
            stack.extend(n for n in adjacency.get(top, ()) if n not in visited)
        yield top, fresh


def strongly_connected_components(
    user_ids: Sequence[int], edges: Iterable[TradeEdge]
) -> list[ComponentResult]:
    """Group users into trading clusters with a two-pass depth-first search.

    The first pass walks the trade graph to fix an order; the second walks the
    reversed graph in that order, each walk forming one cluster. A cluster's
    volume is the total traded between its members.
    """
    user_ids = list(user_ids)
    n = len(user_ids)
    weights = _weights(user_ids, edges)

    forward: dict[int, list[int]] = defaultdict(list)
    backward: dict[int, list[int]] = defaultdict(list)
    for (a, b), w in sorted(weights.items()):
        if w > 0:
            forward[a].append(b)
            backward[b].append(a)

    visited: set[int] = set()
    order: list[int] = []
    for node in range(1, n + 1):
        if node not in visited:
            order.extend(top for top, _ in _dfs_pass(node, forward, visited))
    order.reverse()

    visited = set()
    components: list[ComponentResult] = []
    for start in order[:n]:
        if start in visited:
            continue
        members = [
            user_ids[top - 1]
            for top, fresh in _dfs_pass(start, backward, visited)
            if fresh
        ]
        components.append(ComponentResult(members=members))

    number_of = {uid: k for k, uid in enumerate(user_ids, 1)}
    for component in components:
        numbers = [number_of[m] for m in component.members]
        component.volume = sum(weights.get((a, b), 0) for a in numbers for b in numbers)
    return components


def degree_one_volumes(
    user_ids: Sequence[int], edges: Iterable[TradeEdge]
) -> DegreeDetails:
    """For each user, the volume traded with users who have exactly one partner.

    Trade direction is ignored. Users are ranked by that volume, largest first.
    """
    user_ids = list(user_ids)
    n = len(user_ids)

    symmetric: dict[tuple[int, int], int] = defaultdict(int)
    for (a, b), w in _weights(user_ids, edges).items():
        if a == b:
            symmetric[(a, a)] += w
        else:
            symmetric[(a, b)] += w
            symmetric[(b, a)] += w

    partners: dict[int, list[int]] = defaultdict(list)
    for (a, b), w in symmetric.items():
        if w > 0:
            partners[a].append(b)
    degree_one = {node for node in range(1, n + 1) if len(partners[node]) == 1}

    volumes = [
        (
            sum(symmetric.get((node, other), 0) for other in degree_one),
            user_ids[node - 1],
        )
        for node in range(1, n + 1)
    ]
    volumes.sort(key=lambda item: item[0], reverse=True)

    details = DegreeDetails()
    for rank, (volume, uid) in enumerate(volumes, 1):
        details.volume[uid] = volume
        details.position[uid] = rank
    return details