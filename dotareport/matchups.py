from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from .normalize import Participant
from .roles import JUNGLE, MID_LANE, OFF_LANE, SAFE_LANE, classify_lane


@dataclass(frozen=True)
class LaneGroup:
    focus: Participant
    lane: str
    allies: List[Participant]
    opponents: List[Participant]


def opposing_lane_label(lane: str) -> str:
    if lane == SAFE_LANE:
        return OFF_LANE
    if lane == OFF_LANE:
        return SAFE_LANE
    return lane


def is_direct_lane_opponent(participant: Participant, candidate: Participant) -> bool:
    if participant.is_radiant == candidate.is_radiant:
        return False

    lane = classify_lane(participant)
    candidate_lane = classify_lane(candidate)

    if lane == MID_LANE:
        return candidate_lane == MID_LANE
    if lane == SAFE_LANE:
        return candidate_lane == OFF_LANE or candidate.is_roaming
    if lane == OFF_LANE:
        return candidate_lane == SAFE_LANE or candidate.is_roaming
    if lane == JUNGLE:
        return candidate.is_roaming
    return candidate_lane == lane


def direct_lane_opponents(
    participant: Participant, participants: Sequence[Participant]
) -> List[Participant]:
    return [c for c in participants if is_direct_lane_opponent(participant, c)]


def lane_allies(participant: Participant, participants: Sequence[Participant]) -> List[Participant]:
    lane = classify_lane(participant)
    return [
        c
        for c in participants
        if c is not participant
        and c.is_radiant == participant.is_radiant
        and classify_lane(c) == lane
    ]


def focus_lane_group(focus: Participant, participants: Sequence[Participant]) -> LaneGroup:
    """Whole-lane view around ``focus``: its lane (focus included) vs the lane facing it.

    Opponents are matched by opposing lane label, plus enemy roamers when
    the focus plays a side lane.
    """
    lane = classify_lane(focus)
    enemy_lane = opposing_lane_label(lane)
    side_lane = lane in (SAFE_LANE, OFF_LANE)

    allies = [
        c for c in participants if c.is_radiant == focus.is_radiant and classify_lane(c) == lane
    ]
    opponents = [
        c
        for c in participants
        if c.is_radiant != focus.is_radiant
        and (classify_lane(c) == enemy_lane or (c.is_roaming and side_lane))
    ]
    return LaneGroup(focus=focus, lane=lane, allies=allies, opponents=opponents)
