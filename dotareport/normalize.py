from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple

from .extract import Number, is_finite_number, pick_first_number

RADIANT = "Radiant"
DIRE = "Dire"

# player_slot values below this belong to Radiant, at/above to Dire
RADIANT_SLOT_LIMIT = 128

ITEM_SLOTS: Tuple[str, ...] = (
    "item_0",
    "item_1",
    "item_2",
    "item_3",
    "item_4",
    "item_5",
    "backpack_0",
    "backpack_1",
    "backpack_2",
    "item_neutral",
)


@dataclass(frozen=True)
class Participant:
    player_slot: Optional[Number]
    is_radiant: bool
    personaname: Optional[str]
    account_id: Optional[Number]
    hero_id: Optional[Number]
    kills: Optional[Number]
    deaths: Optional[Number]
    assists: Optional[Number]
    gold_per_min: Optional[Number]
    xp_per_min: Optional[Number]
    last_hits: Optional[Number]
    denies: Optional[Number]
    net_worth: Optional[Number]
    hero_damage: Optional[Number]
    tower_damage: Optional[Number]
    hero_healing: Optional[Number]
    obs_placed: Optional[Number]
    sen_placed: Optional[Number]
    obs_kills: Optional[Number]
    lane_role: Optional[Number]
    is_roaming: bool
    lh_t: Tuple[Any, ...]
    dn_t: Tuple[Any, ...]
    lane_efficiency_pct: Optional[Number]
    lane_kills: Optional[Number]
    items: Tuple[Number, ...]
    camps_stacked: Optional[Number]
    creeps_stacked: Optional[Number]
    rune_pickups: Optional[Number]
    stuns: Optional[Number]
    level: Optional[Number]

    @property
    def team(self) -> str:
        return RADIANT if self.is_radiant else DIRE


@dataclass(frozen=True)
class Objective:
    type: Optional[str]
    time: Optional[Number]
    key: Any
    slot: Optional[Number]
    team: Optional[Number]


@dataclass(frozen=True)
class DraftEntry:
    order: Optional[Number]
    is_pick: bool
    team: Optional[Number]
    hero_id: Optional[Number]

    @property
    def team_name(self) -> str:
        return RADIANT if self.team == 0 else DIRE


@dataclass(frozen=True)
class MatchRecord:
    match_id: Any
    start_time: Optional[Number]
    duration: Optional[Number]
    game_mode: Any
    lobby_type: Any
    region: Any
    cluster: Any
    first_blood_time: Optional[Number]
    radiant_win: bool
    radiant_score: Optional[Number]
    dire_score: Optional[Number]
    radiant_gold_adv: Tuple[Any, ...]
    radiant_xp_adv: Tuple[Any, ...]
    players: Tuple[Participant, ...]
    objectives: Tuple[Objective, ...]
    picks_bans: Tuple[DraftEntry, ...]

    @property
    def winner(self) -> str:
        return RADIANT if self.radiant_win else DIRE

    def team_players(self, is_radiant: bool) -> List[Participant]:
        return [p for p in self.players if p.is_radiant is is_radiant]


def _num(value: Any) -> Optional[Number]:
    return value if is_finite_number(value) else None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _series(value: Any) -> Tuple[Any, ...]:
    return tuple(value) if isinstance(value, (list, tuple)) else ()


def _records(value: Any) -> List[Mapping[str, Any]]:
    if not isinstance(value, (list, tuple)):
        return []
    return [v if isinstance(v, Mapping) else {} for v in value]


def is_radiant_player(raw: Mapping[str, Any]) -> bool:
    flag = raw.get("isRadiant")
    if isinstance(flag, bool):
        return flag
    slot = raw.get("player_slot")
    return is_finite_number(slot) and slot < RADIANT_SLOT_LIMIT


def _item_ids(raw: Mapping[str, Any]) -> Tuple[Number, ...]:
    ids: List[Number] = []
    for slot in ITEM_SLOTS:
        value = raw.get(slot)
        if is_finite_number(value) and value > 0:
            ids.append(value)
    return tuple(ids)


def normalize_participant(raw: Mapping[str, Any]) -> Participant:
    return Participant(
        player_slot=_num(raw.get("player_slot")),
        is_radiant=is_radiant_player(raw),
        personaname=_text(raw.get("personaname")),
        account_id=_num(raw.get("account_id")),
        hero_id=_num(raw.get("hero_id")),
        kills=_num(raw.get("kills")),
        deaths=_num(raw.get("deaths")),
        assists=_num(raw.get("assists")),
        gold_per_min=pick_first_number(raw.get("gpm"), raw.get("gold_per_min")),
        xp_per_min=pick_first_number(raw.get("xpm"), raw.get("xp_per_min")),
        last_hits=_num(raw.get("last_hits")),
        denies=_num(raw.get("denies")),
        net_worth=_num(raw.get("net_worth")),
        hero_damage=_num(raw.get("hero_damage")),
        tower_damage=_num(raw.get("tower_damage")),
        hero_healing=_num(raw.get("hero_healing")),
        obs_placed=_num(raw.get("obs_placed")),
        sen_placed=_num(raw.get("sen_placed")),
        obs_kills=_num(raw.get("obs_kills")),
        lane_role=_num(raw.get("lane_role")),
        is_roaming=raw.get("is_roaming") is True,
        lh_t=_series(raw.get("lh_t")),
        dn_t=_series(raw.get("dn_t")),
        lane_efficiency_pct=_num(raw.get("lane_efficiency_pct")),
        lane_kills=_num(raw.get("lane_kills")),
        items=_item_ids(raw),
        camps_stacked=_num(raw.get("camps_stacked")),
        creeps_stacked=_num(raw.get("creeps_stacked")),
        rune_pickups=_num(raw.get("rune_pickups")),
        stuns=_num(raw.get("stuns")),
        level=_num(raw.get("level")),
    )


def normalize_objective(raw: Mapping[str, Any]) -> Objective:
    return Objective(
        type=_text(raw.get("type")),
        time=_num(raw.get("time")),
        key=raw.get("key"),
        slot=_num(raw.get("slot")),
        team=_num(raw.get("team")),
    )


def normalize_draft_entry(raw: Mapping[str, Any]) -> DraftEntry:
    return DraftEntry(
        order=_num(raw.get("order")),
        is_pick=bool(raw.get("is_pick")),
        team=_num(raw.get("team")),
        hero_id=_num(raw.get("hero_id")),
    )


def normalize_match(raw: Optional[Mapping[str, Any]]) -> MatchRecord:
    if raw is None or not isinstance(raw, Mapping):
        raise ValueError("Match record is missing; cannot build report.")

    return MatchRecord(
        match_id=raw.get("match_id"),
        start_time=_num(raw.get("start_time")),
        duration=_num(raw.get("duration")),
        game_mode=raw.get("game_mode"),
        lobby_type=raw.get("lobby_type"),
        region=raw.get("region"),
        cluster=raw.get("cluster"),
        first_blood_time=_num(raw.get("first_blood_time")),
        radiant_win=bool(raw.get("radiant_win")),
        radiant_score=_num(raw.get("radiant_score")),
        dire_score=_num(raw.get("dire_score")),
        radiant_gold_adv=_series(raw.get("radiant_gold_adv")),
        radiant_xp_adv=_series(raw.get("radiant_xp_adv")),
        players=tuple(normalize_participant(p) for p in _records(raw.get("players"))),
        objectives=tuple(normalize_objective(o) for o in _records(raw.get("objectives"))),
        picks_bans=tuple(normalize_draft_entry(d) for d in _records(raw.get("picks_bans"))),
    )
