"""Assemble the Markdown match report consumed by the coaching model.

Section headings, their order and table column order are a fixed format:
the closing instruction block points back at sections by heading text.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field, field_validator

from .config import NOT_AVAILABLE
from .extract import (
    format_clock,
    format_duration,
    format_number,
    format_unix_date,
    is_finite_number,
    number_or_na,
    number_or_zero,
    percent_format,
    round_half_up,
    sanitize_for_table,
    sum_numbers,
    summarize_advantage,
    timeline_value_at_minute,
)
from .lane_outcome import LANE_MINUTE, score_lane_outcome
from .matchups import direct_lane_opponents, focus_lane_group, lane_allies
from .normalize import MatchRecord, Objective, Participant, normalize_match
from .prompts import OUTPUT_INSTRUCTIONS, TECHNICAL_CONTEXT
from .roles import classify_lane, infer_role_hint

logger = logging.getLogger(__name__)

REPORT_TITLE = "# Dota 2 Match Report"

SECTION_METADATA = "Match Metadata"
SECTION_TEAMS = "Team Summary"
SECTION_FOCUS = "Focus Hero (User Selection)"
SECTION_TOTALS = "Team Economy and Impact Totals"
SECTION_PLAYERS = "Players"
SECTION_DRAFT = "Draft (Picks/Bans)"
SECTION_TIMELINE = "Timeline Signals"
SECTION_OBJECTIVE_COUNTS = "Objective Type Counts"
SECTION_OBJECTIVES = "Objectives (Top 15)"
SECTION_NOTES = "Per Player Detailed Notes"
SECTION_LANE_PHASE = "Lane Phase Details (0-10 min focus)"
SECTION_LANE_CONTEXT = "Selected Hero Lane Matchup Context (Team-Based)"
SECTION_LANE_ANCHOR = "Selected Lane Outcome Anchor (Deterministic)"
SECTION_TECHNICAL = "Technical Context for LLM"
SECTION_PROMPT = "Prompt for LLM (STRICT OUTPUT FORMAT)"

REPORT_SECTIONS: Tuple[str, ...] = (
    SECTION_METADATA,
    SECTION_TEAMS,
    SECTION_FOCUS,
    SECTION_TOTALS,
    SECTION_PLAYERS,
    SECTION_DRAFT,
    SECTION_TIMELINE,
    SECTION_OBJECTIVE_COUNTS,
    SECTION_OBJECTIVES,
    SECTION_NOTES,
    SECTION_LANE_PHASE,
    SECTION_LANE_CONTEXT,
    SECTION_LANE_ANCHOR,
    SECTION_TECHNICAL,
    SECTION_PROMPT,
)

MAX_OBJECTIVE_LINES = 15

TOTALS_HEADER = (
    "| Team | Net Worth | Last Hits | Hero Damage | Tower Damage | Healing | Obs Placed | Sentry Placed |",
    "|---|---:|---:|---:|---:|---:|---:|---:|",
)
PLAYERS_HEADER = (
    "| Team | Player | Hero | K/D/A | GPM | XPM | LH | DN | Net Worth | Hero DMG | Tower DMG "
    "| Obs Placed | Obs Kills | Lane | Role Hint |",
    "|---|---|---:|---|---:|---:|---:|---:|---:|---:|---:|---:|---:|---|---|",
)

TOTALS_COLUMNS: Tuple[Callable[[Participant], Any], ...] = (
    lambda p: p.net_worth,
    lambda p: p.last_hits,
    lambda p: p.hero_damage,
    lambda p: p.tower_damage,
    lambda p: p.hero_healing,
    lambda p: p.obs_placed,
    lambda p: p.sen_placed,
)


class ReportOptions(BaseModel):
    """Caller-supplied report options; name lookups come pre-resolved."""

    focus_hero_id: Optional[int] = Field(default=None, alias="focusHeroId")
    focus_hero_name: Optional[str] = Field(default=None, alias="focusHeroName")
    item_names: Dict[int, str] = Field(default_factory=dict, alias="itemNameLookup")
    hero_names: Dict[int, str] = Field(default_factory=dict, alias="heroNameLookup")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("focus_hero_id", mode="before")
    @classmethod
    def _positive_hero_id(cls, value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(number) or number <= 0 or not number.is_integer():
            return None
        return int(number)

    @field_validator("item_names", "hero_names", mode="before")
    @classmethod
    def _missing_lookup(cls, value: Any) -> Any:
        return {} if value is None else value


# --- labels -----------------------------------------------------------------


def hero_label(hero_id: Any, hero_names: Mapping[int, str]) -> str:
    if not is_finite_number(hero_id):
        return NOT_AVAILABLE
    name = hero_names.get(int(hero_id)) if hero_id == int(hero_id) else None
    if not name:
        return f"Unknown Hero [{format_number(hero_id)}]"
    return sanitize_for_table(name)


def item_label(item_id: Any, item_names: Mapping[int, str]) -> Optional[str]:
    if not is_finite_number(item_id) or item_id <= 0:
        return None
    key = format_number(item_id)
    name = item_names.get(int(item_id)) if item_id == int(item_id) else None
    if not name:
        return f"Unknown Item [{key}]"
    return f"{sanitize_for_table(name)} [{key}]"


def item_list(participant: Participant, item_names: Mapping[int, str]) -> str:
    labels = [item_label(i, item_names) for i in participant.items]
    labels = [label for label in labels if label]
    return ", ".join(labels) if labels else NOT_AVAILABLE


def _player_name(participant: Participant, index: int) -> str:
    return sanitize_for_table(participant.personaname or f"Player {index + 1}")


def _count(value: Any) -> str:
    return format_number(value) if is_finite_number(value) else "0"


def _kda(participant: Participant) -> str:
    return f"{_count(participant.kills)}/{_count(participant.deaths)}/{_count(participant.assists)}"


def _lh10(participant: Participant) -> str:
    return number_or_na(timeline_value_at_minute(participant.lh_t, LANE_MINUTE))


def _dn10(participant: Participant) -> str:
    return number_or_na(timeline_value_at_minute(participant.dn_t, LANE_MINUTE))


def kill_participation(participant: Participant, team_kills: Any) -> Optional[float]:
    if not is_finite_number(team_kills) or team_kills <= 0:
        return None
    kills = number_or_zero(participant.kills)
    assists = number_or_zero(participant.assists)
    return (kills + assists) * 100 / team_kills


def _is_focus(participant: Participant, focus_hero_id: Optional[int]) -> bool:
    return focus_hero_id is not None and participant.hero_id == focus_hero_id


# --- sections ---------------------------------------------------------------


def _metadata_section(match: MatchRecord) -> str:
    first_blood = (
        f"{format_number(match.first_blood_time)}s"
        if match.first_blood_time is not None
        else NOT_AVAILABLE
    )
    return "\n".join(
        [
            f"- Match ID: {sanitize_for_table(match.match_id)}",
            f"- Start time (UTC): {format_unix_date(match.start_time)}",
            f"- Duration: {format_duration(match.duration)}",
            f"- Game mode: {sanitize_for_table(match.game_mode)}",
            f"- Lobby type: {sanitize_for_table(match.lobby_type)}",
            f"- Region/Cluster: {sanitize_for_table(match.region)} / {sanitize_for_table(match.cluster)}",
            f"- First blood time: {first_blood}",
        ]
    )


def _team_summary_section(match: MatchRecord) -> str:
    return "\n".join(
        [
            f"- Winner: {match.winner}",
            f"- Radiant score: {number_or_na(match.radiant_score)}",
            f"- Dire score: {number_or_na(match.dire_score)}",
        ]
    )


def _focus_section(
    focus_players: Sequence[Participant], options: ReportOptions
) -> str:
    if options.focus_hero_id is None:
        return "\n".join(["- Selected hero: N/A", "- No focus hero selected."])

    name = (options.focus_hero_name or "").strip()
    selected = (
        sanitize_for_table(name) if name else hero_label(options.focus_hero_id, options.hero_names)
    )
    lines = [f"- Selected hero: {selected}"]
    if not focus_players:
        lines.append("- Hero selected by user was not found in this match payload.")
        return "\n".join(lines)

    for idx, p in enumerate(focus_players):
        lines.append(
            f"- {_player_name(p, idx)} ({p.team}) - Hero {hero_label(p.hero_id, options.hero_names)}, "
            f"K/D/A {_kda(p)}, GPM {number_or_na(p.gold_per_min)}, XPM {number_or_na(p.xp_per_min)}, "
            f"Hero damage {number_or_na(p.hero_damage)}, Net worth {number_or_na(p.net_worth)}"
        )
    return "\n".join(lines)


def team_totals_row(team: str, players: Sequence[Participant]) -> str:
    cells = [format_number(sum_numbers(players, column)) for column in TOTALS_COLUMNS]
    return f"| {team} | " + " | ".join(cells) + " |"


def _totals_section(match: MatchRecord) -> str:
    return "\n".join(
        [
            *TOTALS_HEADER,
            team_totals_row("Radiant", match.team_players(True)),
            team_totals_row("Dire", match.team_players(False)),
        ]
    )


def player_row(
    participant: Participant, index: int, options: ReportOptions
) -> str:
    marker = " (YOU)" if _is_focus(participant, options.focus_hero_id) else ""
    cells = [
        participant.team,
        f"{_player_name(participant, index)}{marker}",
        hero_label(participant.hero_id, options.hero_names),
        _kda(participant),
        number_or_na(participant.gold_per_min),
        number_or_na(participant.xp_per_min),
        number_or_na(participant.last_hits),
        number_or_na(participant.denies),
        number_or_na(participant.net_worth),
        number_or_na(participant.hero_damage),
        number_or_na(participant.tower_damage),
        number_or_na(participant.obs_placed),
        number_or_na(participant.obs_kills),
        classify_lane(participant),
        sanitize_for_table(infer_role_hint(participant).value),
    ]
    return "| " + " | ".join(cells) + " |"


def _players_section(match: MatchRecord, options: ReportOptions) -> str:
    if not match.players:
        return "- No player data available."
    rows = [player_row(p, idx, options) for idx, p in enumerate(match.players)]
    return "\n".join([*PLAYERS_HEADER, *rows])


def _draft_section(match: MatchRecord, options: ReportOptions) -> str:
    if not match.picks_bans:
        return "- No draft data available."
    lines = []
    for idx, entry in enumerate(match.picks_bans):
        action = "Pick" if entry.is_pick else "Ban"
        lines.append(
            f"- #{idx + 1} {entry.team_name} {action}: {hero_label(entry.hero_id, options.hero_names)}"
        )
    return "\n".join(lines)


def _timeline_section(match: MatchRecord) -> str:
    gold = summarize_advantage(match.radiant_gold_adv)
    xp = summarize_advantage(match.radiant_xp_adv)
    return "\n".join(
        [
            f"- Radiant gold max lead: {round_half_up(gold.max_lead)}",
            f"- Radiant gold max deficit: {round_half_up(gold.max_deficit)}",
            f"- Gold swing: {round_half_up(gold.swing)}",
            f"- Radiant XP max lead: {round_half_up(xp.max_lead)}",
            f"- Radiant XP max deficit: {round_half_up(xp.max_deficit)}",
            f"- XP swing: {round_half_up(xp.swing)}",
        ]
    )


def objective_type_counts(objectives: Sequence[Objective]) -> List[Tuple[str, int]]:
    counts: Counter = Counter()
    for objective in objectives:
        counts[objective.type or "UNKNOWN"] += 1
    # Counter keeps first-seen order and sorted() is stable, so ties stay in that order
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


def _objective_counts_section(match: MatchRecord) -> str:
    entries = objective_type_counts(match.objectives)
    if not entries:
        return "- No objectives data available."
    return "\n".join(f"- {sanitize_for_table(t)}: {n}" for t, n in entries)


def objective_line(objective: Objective) -> str:
    key_value = objective.key or objective.slot or ""
    if is_finite_number(key_value):
        key_value = format_number(key_value)
    key = sanitize_for_table(key_value) if key_value != "" else ""
    suffix = f" ({key})" if key not in ("", NOT_AVAILABLE) else ""
    return f"- {format_clock(objective.time)} - {sanitize_for_table(objective.type)}{suffix}"


def _objectives_section(match: MatchRecord) -> str:
    objectives = match.objectives[:MAX_OBJECTIVE_LINES]
    if not objectives:
        return "- No objectives data available."
    return "\n".join(objective_line(o) for o in objectives)


def player_notes_line(
    participant: Participant, index: int, team_kills: Any, options: ReportOptions
) -> str:
    kp = percent_format(kill_participation(participant, team_kills))
    return (
        f"- {participant.team} - {_player_name(participant, index)} "
        f"(Hero {hero_label(participant.hero_id, options.hero_names)}, "
        f"role hint {infer_role_hint(participant).value}): "
        f"level {number_or_na(participant.level)}, KP {kp}, "
        f"stuns {number_or_na(participant.stuns)}, healing {number_or_na(participant.hero_healing)}, "
        f"camps stacked {number_or_na(participant.camps_stacked)}, "
        f"rune pickups {number_or_na(participant.rune_pickups)}, "
        f"lane efficiency {percent_format(participant.lane_efficiency_pct)}, "
        f"items [{item_list(participant, options.item_names)}]"
    )


def _notes_section(match: MatchRecord, options: ReportOptions) -> str:
    if not match.players:
        return "- No player data available."
    radiant_kills = number_or_zero(match.radiant_score)
    dire_kills = number_or_zero(match.dire_score)
    return "\n".join(
        player_notes_line(p, idx, radiant_kills if p.is_radiant else dire_kills, options)
        for idx, p in enumerate(match.players)
    )


def format_lane_opponent(participant: Participant, options: ReportOptions) -> str:
    return (
        f"{hero_label(participant.hero_id, options.hero_names)} ({classify_lane(participant)}, "
        f"LH@10 {_lh10(participant)}, DN@10 {_dn10(participant)}, "
        f"lane efficiency {percent_format(participant.lane_efficiency_pct)})"
    )


def format_lane_ally(participant: Participant, options: ReportOptions) -> str:
    return (
        f"{hero_label(participant.hero_id, options.hero_names)} "
        f"(LH@10 {_lh10(participant)}, DN@10 {_dn10(participant)}, "
        f"lane efficiency {percent_format(participant.lane_efficiency_pct)})"
    )


def _joined(
    players: Sequence[Participant],
    formatter: Callable[[Participant, ReportOptions], str],
    options: ReportOptions,
) -> str:
    if not players:
        return NOT_AVAILABLE
    return "; ".join(formatter(p, options) for p in players)


def lane_phase_line(
    participant: Participant,
    index: int,
    participants: Sequence[Participant],
    options: ReportOptions,
) -> str:
    allies = _joined(lane_allies(participant, participants), format_lane_ally, options)
    opponents = _joined(
        direct_lane_opponents(participant, participants), format_lane_opponent, options
    )
    return (
        f"- {participant.team} - {_player_name(participant, index)} "
        f"({hero_label(participant.hero_id, options.hero_names)}): "
        f"lane {classify_lane(participant)}, role hint {infer_role_hint(participant).value}, "
        f"lane efficiency {percent_format(participant.lane_efficiency_pct)}, "
        f"LH@10 {_lh10(participant)}, DN@10 {_dn10(participant)}, "
        f"lane kills {number_or_na(participant.lane_kills)}, "
        f"roaming {'yes' if participant.is_roaming else 'no'}, "
        f"camps stacked {number_or_na(participant.camps_stacked)}, "
        f"creeps stacked {number_or_na(participant.creeps_stacked)}, "
        f"lane allies [{allies}], direct lane opponents [{opponents}]"
    )


def _lane_phase_section(match: MatchRecord, options: ReportOptions) -> str:
    if not match.players:
        return "- No player lane-phase data available."
    return "\n".join(
        lane_phase_line(p, idx, match.players, options) for idx, p in enumerate(match.players)
    )


def _lane_context_section(
    match: MatchRecord, focus_players: Sequence[Participant], options: ReportOptions
) -> str:
    if not focus_players:
        return "- No selected-hero lane context available."
    lines = []
    for idx, focus in enumerate(focus_players):
        group = focus_lane_group(focus, match.players)
        lines.append(
            f"- Focus #{idx + 1}: {hero_label(focus.hero_id, options.hero_names)} "
            f"({focus.team}, {group.lane}) -> evaluate this lane as a team unit. "
            f"Allied lane participants [{_joined(group.allies, format_lane_ally, options)}] "
            f"vs direct lane opponents [{_joined(group.opponents, format_lane_opponent, options)}]"
        )
    return "\n".join(lines)


def _lane_anchor_section(match: MatchRecord, focus_players: Sequence[Participant]) -> str:
    if not focus_players:
        return "- Resultado ancla no disponible: no selected-hero lane context."
    group = focus_lane_group(focus_players[0], match.players)
    outcome = score_lane_outcome(group.allies, group.opponents)
    ally, enemy = outcome.ally, outcome.enemy
    return "\n".join(
        [
            f"- Resultado ancla calculado para la lane seleccionada: {outcome.label}",
            f"- Puntaje ancla (deterministico): {format_number(outcome.score)}",
            f"- Aliados lane (sum/avg): LH@10 {format_number(ally.lh10)}, DN@10 {format_number(ally.dn10)}, "
            f"lane efficiency avg {percent_format(ally.lane_efficiency_avg)}",
            f"- Rivales lane (sum/avg): LH@10 {format_number(enemy.lh10)}, DN@10 {format_number(enemy.dn10)}, "
            f"lane efficiency avg {percent_format(enemy.lane_efficiency_avg)}",
        ]
    )


# --- entry point ------------------------------------------------------------


def _coerce_options(options: Union[ReportOptions, Mapping[str, Any], None]) -> ReportOptions:
    if isinstance(options, ReportOptions):
        return options
    return ReportOptions.model_validate(dict(options or {}))


def assemble_report(
    match: Union[MatchRecord, Mapping[str, Any], None],
    options: Union[ReportOptions, Mapping[str, Any], None] = None,
) -> str:
    """Render ``match`` as the fixed-format Markdown report.

    ``match`` may be a :class:`MatchRecord` or the provider's raw JSON dict.
    Missing fields degrade to ``N/A`` (display) or ``0`` (team sums); only a
    missing record raises ``ValueError``.
    """
    if not isinstance(match, MatchRecord):
        match = normalize_match(match)
    opts = _coerce_options(options)

    focus_players = [p for p in match.players if _is_focus(p, opts.focus_hero_id)]
    logger.debug(
        "Assembling report for match %s: %d players, %d objectives, focus hero %s (%d found)",
        match.match_id,
        len(match.players),
        len(match.objectives),
        opts.focus_hero_id,
        len(focus_players),
    )

    bodies: Dict[str, str] = {
        SECTION_METADATA: _metadata_section(match),
        SECTION_TEAMS: _team_summary_section(match),
        SECTION_FOCUS: _focus_section(focus_players, opts),
        SECTION_TOTALS: _totals_section(match),
        SECTION_PLAYERS: _players_section(match, opts),
        SECTION_DRAFT: _draft_section(match, opts),
        SECTION_TIMELINE: _timeline_section(match),
        SECTION_OBJECTIVE_COUNTS: _objective_counts_section(match),
        SECTION_OBJECTIVES: _objectives_section(match),
        SECTION_NOTES: _notes_section(match, opts),
        SECTION_LANE_PHASE: _lane_phase_section(match, opts),
        SECTION_LANE_CONTEXT: _lane_context_section(match, focus_players, opts),
        SECTION_LANE_ANCHOR: _lane_anchor_section(match, focus_players),
        SECTION_TECHNICAL: TECHNICAL_CONTEXT,
        SECTION_PROMPT: OUTPUT_INSTRUCTIONS,
    }

    lines = [REPORT_TITLE, ""]
    for heading in REPORT_SECTIONS:
        lines.append(f"## {heading}")
        lines.append(bodies[heading])
        lines.append("")
    return "\n".join(lines)
