from typing import Any

from dotareport.matchups import (
    direct_lane_opponents,
    focus_lane_group,
    is_direct_lane_opponent,
    lane_allies,
    opposing_lane_label,
)
from dotareport.normalize import Participant, normalize_participant


def _player(slot: int, lane: Any = None, roaming: bool = False, **fields: Any) -> Participant:
    return normalize_participant({"player_slot": slot, "lane_role": lane, "is_roaming": roaming, **fields})


def test_mid_only_faces_mid() -> None:
    mid = _player(0, 2)
    enemy_mid = _player(128, 2)
    enemy_roamer = _player(129, 3, roaming=True)
    assert direct_lane_opponents(mid, [mid, enemy_mid, enemy_roamer]) == [enemy_mid]


def test_safe_lane_faces_offlane_and_roamers() -> None:
    carry = _player(0, 1)
    offlaner = _player(128, 3)
    roamer = _player(129, 2, roaming=True)
    enemy_carry = _player(130, 1)
    assert direct_lane_opponents(carry, [carry, offlaner, roamer, enemy_carry]) == [offlaner, roamer]


def test_off_lane_faces_safe_lane_and_roamers() -> None:
    offlaner = _player(0, 3)
    enemy_carry = _player(128, 1)
    roamer = _player(129, 4, roaming=True)
    assert direct_lane_opponents(offlaner, [offlaner, enemy_carry, roamer]) == [enemy_carry, roamer]


def test_jungle_only_faces_roamers() -> None:
    jungler = _player(0, 4)
    enemy_jungler = _player(128, 4)
    roamer = _player(129, 1, roaming=True)
    assert direct_lane_opponents(jungler, [jungler, enemy_jungler, roamer]) == [roamer]


def test_unknown_lane_matches_same_label() -> None:
    unknown = _player(0)
    enemy_unknown = _player(128, 9)
    enemy_mid = _player(129, 2)
    assert direct_lane_opponents(unknown, [unknown, enemy_unknown, enemy_mid]) == [enemy_unknown]


def test_never_reflexive_and_never_same_team() -> None:
    players = [_player(0, 1, roaming=True), _player(1, 3, roaming=True), _player(128, 2)]
    for p in players:
        assert all(o is not p for o in direct_lane_opponents(p, players))
        assert not is_direct_lane_opponent(p, p)
    assert not is_direct_lane_opponent(players[0], players[1])


def test_side_lane_roaming_symmetry_but_not_mid_or_jungle() -> None:
    carry = _player(0, 1)
    roaming_offlaner = _player(128, 3, roaming=True)
    assert is_direct_lane_opponent(carry, roaming_offlaner)
    assert is_direct_lane_opponent(roaming_offlaner, carry)

    mid = _player(1, 2)
    roaming_support = _player(129, 1, roaming=True)
    assert is_direct_lane_opponent(roaming_support, mid) is False
    assert is_direct_lane_opponent(mid, roaming_support) is False

    jungler = _player(2, 4)
    enemy_safe = _player(130, 1)
    assert is_direct_lane_opponent(jungler, enemy_safe) is False
    assert is_direct_lane_opponent(enemy_safe, jungler) is False


def test_lane_allies_exclude_self_and_roaming_exception() -> None:
    carry = _player(0, 1)
    support = _player(1, 1)
    roamer = _player(2, 3, roaming=True)
    enemy = _player(128, 1)
    assert lane_allies(carry, [carry, support, roamer, enemy]) == [support]


def test_focus_lane_group_includes_focus_and_opposing_lane() -> None:
    carry = _player(0, 1)
    support = _player(1, 1)
    offlaner = _player(128, 3)
    roamer = _player(129, 2, roaming=True)
    enemy_mid = _player(130, 2)
    group = focus_lane_group(carry, [carry, support, offlaner, roamer, enemy_mid])
    assert group.lane == "Safe lane"
    assert group.allies == [carry, support]
    assert group.opponents == [offlaner, roamer]


def test_focus_lane_group_jungle_faces_enemy_jungle() -> None:
    jungler = _player(0, 4)
    enemy_jungler = _player(128, 4)
    roamer = _player(129, 1, roaming=True)
    group = focus_lane_group(jungler, [jungler, enemy_jungler, roamer])
    assert group.opponents == [enemy_jungler]
    assert opposing_lane_label("Mid lane") == "Mid lane"
