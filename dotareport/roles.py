from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Tuple

from .extract import Number, number_or_zero
from .normalize import Participant

SAFE_LANE = "Safe lane"
MID_LANE = "Mid lane"
OFF_LANE = "Off lane"
JUNGLE = "Jungle"
UNKNOWN_LANE = "Unknown"

LANE_LABELS: Dict[int, str] = {
    1: SAFE_LANE,
    2: MID_LANE,
    3: OFF_LANE,
    4: JUNGLE,
}


class RoleHint(str, Enum):
    """Heuristic role tag; a hint for fair evaluation, not ground truth."""

    CORE_MID = "Core (mid)"
    SUPPORT_SAFE = "Support (safe)"
    CORE_CARRY = "Core (carry)"
    SUPPORT_ROAMING = "Support (roaming/pos4)"
    CORE_OFFLANE = "Core (offlane)"
    CORE = "Core"
    SUPPORT = "Support"
    FLEXIBLE = "Flexible/Unknown"


def classify_lane(participant: Participant) -> str:
    code = participant.lane_role
    if code is None or code != int(code):
        return UNKNOWN_LANE
    return LANE_LABELS.get(int(code), UNKNOWN_LANE)


@dataclass(frozen=True)
class RoleSignals:
    lane: str
    gpm: Number
    last_hits: Number
    total_wards: Number


def role_signals(participant: Participant) -> RoleSignals:
    return RoleSignals(
        lane=classify_lane(participant),
        gpm=number_or_zero(participant.gold_per_min),
        last_hits=number_or_zero(participant.last_hits),
        total_wards=number_or_zero(participant.obs_placed) + number_or_zero(participant.sen_placed),
    )


RoleRule = Tuple[Callable[[RoleSignals], bool], RoleHint]

# Evaluated top-down, first match wins.
ROLE_RULES: List[RoleRule] = [
    (lambda s: s.lane == MID_LANE, RoleHint.CORE_MID),
    (
        lambda s: s.lane == SAFE_LANE and s.total_wards >= 6 and s.gpm < 450,
        RoleHint.SUPPORT_SAFE,
    ),
    (lambda s: s.lane == SAFE_LANE, RoleHint.CORE_CARRY),
    (
        lambda s: s.lane == OFF_LANE and s.total_wards >= 6 and s.gpm < 430,
        RoleHint.SUPPORT_ROAMING,
    ),
    (lambda s: s.lane == OFF_LANE, RoleHint.CORE_OFFLANE),
    (lambda s: s.gpm >= 500 or s.last_hits >= 180, RoleHint.CORE),
    (
        lambda s: s.total_wards >= 8 or (s.gpm < 400 and s.last_hits < 90),
        RoleHint.SUPPORT,
    ),
]


def infer_role_hint(participant: Participant) -> RoleHint:
    signals = role_signals(participant)
    for predicate, hint in ROLE_RULES:
        if predicate(signals):
            return hint
    return RoleHint.FLEXIBLE
