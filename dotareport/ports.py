"""Ports (interfaces) for the providers surrounding the report engine."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class CoachAnalysis:
    """Free-form analysis returned by the text-completion provider."""

    analysis: str
    metadata: str


class MatchDataPort(ABC):
    """Port for fetching raw match records."""

    @abstractmethod
    def fetch_match(self, match_id: str) -> Dict[str, Any]:
        """Fetch the raw match record.

        Args:
            match_id: Numeric match identifier

        Returns:
            Raw match JSON as returned by the provider

        Raises:
            MatchNotFoundError, RateLimitedError, ProviderUnavailableError
        """
        ...


class NameLookupPort(ABC):
    """Port for resolving numeric hero/item ids to display names."""

    @abstractmethod
    def item_names(self) -> Dict[int, str]:
        ...

    @abstractmethod
    def hero_names(self) -> Dict[int, str]:
        ...


class CompletionPort(ABC):
    """Port for the text-completion provider that writes the coaching analysis."""

    @abstractmethod
    def complete(self, report_text: str) -> CoachAnalysis:
        """Send the assembled report and return the model's analysis.

        Args:
            report_text: Markdown report from ``assemble_report``

        Returns:
            Analysis text plus the prompt metadata that produced it
        """
        ...
