from __future__ import annotations

import argparse
import json
import logging
import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .analysis import MatchAnalysisRequest, MatchAnalysisUseCase
from .coach_client import CoachClient, CompletionError
from .opendota_client import OpenDotaClient
from .report import ReportOptions, assemble_report

logger = logging.getLogger(__name__)


def _read_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _write_text(path: str, text: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def _load_name_map(path: Optional[str]) -> Dict[int, str]:
    if not path:
        return {}
    raw = _read_json(path)
    return {int(k): str(v) for k, v in raw.items() if str(k).isdigit() and v}


def _parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dota 2 match report and coaching analysis")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--match-id", default=None, help="OpenDota match id to fetch")
    source.add_argument("--from-raw", default=None, help="Load raw match JSON instead of querying OpenDota")
    parser.add_argument("--hero-id", type=int, default=None, help="Focus hero id")
    parser.add_argument("--hero-name", default=None, help="Focus hero display name")
    parser.add_argument("--items", default=None, help="JSON map of item id -> name")
    parser.add_argument("--heroes", default=None, help="JSON map of hero id -> name")
    parser.add_argument("--analyze", action="store_true", help="Send the report to the coaching model")
    parser.add_argument("--output", default=None, help="Path to write the report/analysis")
    parser.add_argument("--cache", action="store_true", help="Enable on-disk cache for name lookups")
    parser.add_argument("--debug", action="store_true", help="Print debug logs")
    return parser.parse_args(argv)


def _report_from_raw(args: argparse.Namespace) -> str:
    raw = _read_json(args.from_raw)
    options = ReportOptions(
        focus_hero_id=args.hero_id,
        focus_hero_name=args.hero_name,
        item_names=_load_name_map(args.items),
        hero_names=_load_name_map(args.heroes),
    )
    return assemble_report(raw, options)


def main(argv: Optional[list] = None) -> None:
    load_dotenv()
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cache:
        os.environ["OPENDOTA_CACHE"] = "1"

    if args.from_raw:
        output_text = _report_from_raw(args)
        if args.analyze:
            try:
                output_text = CoachClient().complete(output_text).analysis
            except CompletionError as e:
                raise SystemExit(f"Analysis failed ({e.status}): {e}")
    else:
        client = OpenDotaClient()
        use_case = MatchAnalysisUseCase(
            client,
            client,
            CoachClient() if args.analyze else None,
        )
        result = use_case.execute(
            MatchAnalysisRequest(
                match_id=args.match_id,
                focus_hero_id=args.hero_id,
                focus_hero_name=args.hero_name,
                analyze=args.analyze,
            )
        )
        if not result.success:
            raise SystemExit(f"Match analysis failed ({result.status}): {result.error}")
        output_text = result.analysis if args.analyze else result.report_text

    if args.output:
        _write_text(args.output, output_text or "")
        logger.info("Wrote %s", args.output)
    else:
        print(output_text)


if __name__ == "__main__":
    main()
