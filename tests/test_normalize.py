import json
from pathlib import Path

import pytest

from dotareport.normalize import normalize_match, normalize_participant

FIXTURE = Path(__file__).parent / "fixtures" / "match_sample.json"


def test_normalize_sample_match() -> None:
    match = normalize_match(json.loads(FIXTURE.read_text(encoding="utf-8")))
    assert len(match.players) == 4
    assert [p.team for p in match.players] == ["Radiant", "Radiant", "Dire", "Dire"]
    assert match.winner == "Radiant"
    assert match.players[0].items == (1, 63, 999, 300)
    assert match.players[3].net_worth is None
    assert len(match.objectives) == 4
    assert match.picks_bans[0].team_name == "Radiant"


def test_team_derivation_from_slot() -> None:
    assert normalize_participant({"player_slot": 127}).is_radiant is True
    assert normalize_participant({"player_slot": 128}).is_radiant is False
    assert normalize_participant({}).is_radiant is False
    assert normalize_participant({"player_slot": 130, "isRadiant": True}).is_radiant is True


def test_legacy_rate_fields_prefer_short_name() -> None:
    p = normalize_participant({"gpm": 400, "gold_per_min": 999, "xp_per_min": 520})
    assert p.gold_per_min == 400
    assert p.xp_per_min == 520


def test_missing_collections_become_empty() -> None:
    match = normalize_match({"match_id": 1, "players": None, "objectives": "bad"})
    assert match.players == ()
    assert match.objectives == ()
    assert match.picks_bans == ()


def test_missing_record_raises() -> None:
    with pytest.raises(ValueError):
        normalize_match(None)
