"""Deterministic lane verdict used as the anchor for the narrative analysis."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Sequence

from .extract import Number, number_or_zero, round_one, timeline_value_at_minute
from .normalize import Participant

LANE_MINUTE = 10

LAST_HIT_WEIGHT = 1.0
DENY_WEIGHT = 1.5
EFFICIENCY_WEIGHT = 1.2

WON_THRESHOLD = 12
LOST_THRESHOLD = -12


class LaneResult(str, Enum):
    WON = "won"
    TIED = "tied"
    LOST = "lost"


LANE_RESULT_LABELS: Dict[LaneResult, str] = {
    LaneResult.WON: "Ganada",
    LaneResult.TIED: "Empate",
    LaneResult.LOST: "Perdida",
}


@dataclass(frozen=True)
class LaneSummary:
    lh10: Number
    dn10: Number
    lane_efficiency_avg: float
    count: int


@dataclass(frozen=True)
class LaneOutcome:
    result: LaneResult
    score: float
    ally: LaneSummary
    enemy: LaneSummary

    @property
    def label(self) -> str:
        return LANE_RESULT_LABELS[self.result]


def summarize_lane_group(players: Sequence[Participant]) -> LaneSummary:
    lh10: Number = 0
    dn10: Number = 0
    efficiency: Number = 0
    for p in players:
        lh10 += number_or_zero(timeline_value_at_minute(p.lh_t, LANE_MINUTE))
        dn10 += number_or_zero(timeline_value_at_minute(p.dn_t, LANE_MINUTE))
        efficiency += number_or_zero(p.lane_efficiency_pct)
    count = len(players)
    return LaneSummary(
        lh10=lh10,
        dn10=dn10,
        lane_efficiency_avg=efficiency / count if count else 0.0,
        count=count,
    )


def lane_score(ally: LaneSummary, enemy: LaneSummary) -> float:
    return (
        (ally.lh10 - enemy.lh10) * LAST_HIT_WEIGHT
        + (ally.dn10 - enemy.dn10) * DENY_WEIGHT
        + (ally.lane_efficiency_avg - enemy.lane_efficiency_avg) * EFFICIENCY_WEIGHT
    )


def result_for_score(score: float) -> LaneResult:
    if score >= WON_THRESHOLD:
        return LaneResult.WON
    if score <= LOST_THRESHOLD:
        return LaneResult.LOST
    return LaneResult.TIED


def score_lane_outcome(
    allies: Sequence[Participant], enemies: Sequence[Participant]
) -> LaneOutcome:
    ally = summarize_lane_group(allies)
    enemy = summarize_lane_group(enemies)
    score = lane_score(ally, enemy)
    return LaneOutcome(
        result=result_for_score(score),
        score=round_one(score),
        ally=ally,
        enemy=enemy,
    )
