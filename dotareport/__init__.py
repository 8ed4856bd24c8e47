"""Dota 2 match report generator package."""

__all__ = [
    "config",
    "extract",
    "normalize",
    "roles",
    "matchups",
    "lane_outcome",
    "prompts",
    "report",
    "ports",
    "opendota_client",
    "coach_client",
    "analysis",
    "cli",
]
