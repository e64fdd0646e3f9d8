import pytest

from dalalstreet.graphs import (
    ComponentResult,
    DegreeDetails,
    TradeEdge,
    degree_one_volumes,
    strongly_connected_components,
)


def test_no_users_gives_no_components():
    assert strongly_connected_components([], []) == []


def test_users_without_trades_are_singletons():
    users = [4, 9, 15]
    result = strongly_connected_components(users, [])
    assert sorted(m for c in result for m in c.members) == sorted(users)
    assert all(len(c.members) == 1 and c.volume == 0 for c in result)


def test_cycle_forms_one_component_with_all_volume():
    users = [10, 20, 30, 40]
    edges = [TradeEdge(10, 20, 5), TradeEdge(20, 30, 7), TradeEdge(30, 10, 11)]
    result = strongly_connected_components(users, edges)
    by_size = sorted(result, key=lambda c: len(c.members))
    assert [sorted(c.members) for c in by_size] == [[40], [10, 20, 30]]
    assert by_size[0].volume == 0
    assert by_size[1].volume == sum(e.volume for e in edges)


def test_repeated_trades_accumulate_in_volume():
    users = [1, 2]
    edges = [TradeEdge(1, 2, 3), TradeEdge(2, 1, 4), TradeEdge(1, 2, 6)]
    result = strongly_connected_components(users, edges)
    assert len(result) == 1
    assert sorted(result[0].members) == users
    assert result[0].volume == sum(e.volume for e in edges)


def test_trades_with_unknown_users_are_ignored():
    users = [1, 2]
    result = strongly_connected_components(users, [TradeEdge(1, 99, 50)])
    assert all(c.volume == 0 for c in result)
    assert sorted(m for c in result for m in c.members) == users


def test_component_to_dict():
    c = ComponentResult(members=[3, 5], volume=12)
    assert c.to_dict() == {"members": [3, 5], "volume": 12}


def test_pair_of_single_partners():
    edge = TradeEdge(1, 2, 10)
    details = degree_one_volumes([1, 2], [edge])
    assert details.volume == {1: edge.volume, 2: edge.volume}
    assert sorted(details.position.values()) == [1, 2]


def test_star_centre_collects_leaf_volume():
    edges = [TradeEdge(1, 2, 100), TradeEdge(3, 1, 50)]
    details = degree_one_volumes([1, 2, 3], edges)
    assert details.volume[1] == edges[0].volume + edges[1].volume
    assert details.volume[2] == 0
    assert details.volume[3] == 0
    assert details.position[1] == 1


def test_direction_is_ignored():
    forward = degree_one_volumes([1, 2, 3], [TradeEdge(1, 2, 8), TradeEdge(1, 3, 9)])
    backward = degree_one_volumes([1, 2, 3], [TradeEdge(2, 1, 8), TradeEdge(3, 1, 9)])
    assert forward.volume == backward.volume


def test_positions_follow_descending_volume():
    edges = [
        TradeEdge(1, 2, 30),
        TradeEdge(3, 4, 70),
        TradeEdge(5, 6, 10),
        TradeEdge(5, 7, 20),
    ]
    details = degree_one_volumes([1, 2, 3, 4, 5, 6, 7], edges)
    ranked = sorted(details.position, key=details.position.get)
    volumes = [details.volume[u] for u in ranked]
    assert volumes == sorted(volumes, reverse=True)
    assert sorted(details.position.values()) == list(range(1, 8))


def test_empty_degree_details():
    assert degree_one_volumes([], []) == DegreeDetails()


@pytest.mark.parametrize("users", [[1], [5, 6, 7]])
def test_no_trades_gives_zero_volume(users):
    details = degree_one_volumes(users, [])
    assert details.volume == {u: 0 for u in users}