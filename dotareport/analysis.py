"""Use case for producing a match report and, optionally, its coaching analysis."""

import logging
from dataclasses import dataclass
from typing import Optional

from .coach_client import CompletionError
from .opendota_client import OpenDotaError, is_valid_match_id
from .ports import CompletionPort, MatchDataPort, NameLookupPort
from .report import ReportOptions, assemble_report

logger = logging.getLogger(__name__)


@dataclass
class MatchAnalysisRequest:
    """Request to analyze one match."""

    match_id: str
    focus_hero_id: Optional[int] = None
    focus_hero_name: Optional[str] = None
    analyze: bool = True


@dataclass
class MatchAnalysisResult:
    """Result of match analysis."""

    success: bool
    match_id: str
    report_text: Optional[str] = None
    analysis: Optional[str] = None
    metadata: Optional[str] = None
    error: Optional[str] = None
    status: int = 200


class MatchAnalysisUseCase:
    """Orchestrates fetch -> report -> completion.

    The report itself is a pure function of the fetched record and the
    resolved name maps; everything with I/O lives behind the ports.
    """

    def __init__(
        self,
        match_data: MatchDataPort,
        names: NameLookupPort,
        completion: Optional[CompletionPort] = None,
    ):
        self._match_data = match_data
        self._names = names
        self._completion = completion

    def execute(self, request: MatchAnalysisRequest) -> MatchAnalysisResult:
        """Execute the analysis.

        Args:
            request: Match analysis request

        Returns:
            Result with the report text, and the analysis when requested
        """
        match_id = str(request.match_id).strip()
        if not is_valid_match_id(match_id):
            return MatchAnalysisResult(
                success=False,
                match_id=match_id,
                error="match_id invalido. Debe ser numerico (8 a 20 digitos).",
                status=400,
            )

        try:
            raw = self._match_data.fetch_match(match_id)
            options = ReportOptions(
                focus_hero_id=request.focus_hero_id,
                focus_hero_name=request.focus_hero_name,
                item_names=self._names.item_names(),
                hero_names=self._names.hero_names(),
            )
            report_text = assemble_report(raw, options)
            logger.info("Built report for match %s (%d chars)", match_id, len(report_text))

            if not request.analyze or self._completion is None:
                return MatchAnalysisResult(success=True, match_id=match_id, report_text=report_text)

            coach = self._completion.complete(report_text)
            return MatchAnalysisResult(
                success=True,
                match_id=match_id,
                report_text=report_text,
                analysis=coach.analysis,
                metadata=coach.metadata,
            )
        except (OpenDotaError, CompletionError) as e:
            logger.error("Match analysis failed for %s: %s", match_id, e)
            return MatchAnalysisResult(
                success=False,
                match_id=match_id,
                error=str(e),
                status=e.status or 500,
            )
