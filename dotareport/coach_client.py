from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .config import CompletionConfig, completion_config_from_env
from .ports import CoachAnalysis, CompletionPort
from .prompts import COACH_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class CompletionError(RuntimeError):
    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


def extract_response_text(payload: Any) -> str:
    if not isinstance(payload, dict):
        return ""
    output_text = payload.get("output_text")
    if isinstance(output_text, str) and output_text.strip():
        return output_text.strip()

    fragments: List[str] = []
    for item in payload.get("output") or []:
        if not isinstance(item, dict):
            continue
        for chunk in item.get("content") or []:
            text = chunk.get("text") if isinstance(chunk, dict) else None
            if isinstance(text, str) and text.strip():
                fragments.append(text.strip())
    return "\n\n".join(fragments).strip()


def build_input(report_text: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": COACH_SYSTEM_PROMPT},
        {"role": "user", "content": report_text},
    ]


def prompt_metadata(report_text: str) -> str:
    return "\n".join(["system_prompt:", COACH_SYSTEM_PROMPT, "", "user_input:", report_text])


@dataclass
class CoachClient(CompletionPort):
    config: Optional[CompletionConfig] = None
    session: Any = None

    def __post_init__(self) -> None:
        if self.config is None:
            self.config = completion_config_from_env()
        if self.session is None:
            self.session = requests.Session()

    def complete(self, report_text: str) -> CoachAnalysis:
        assert self.config is not None
        if not self.config.api_key:
            raise CompletionError("Falta OPENAI_API_KEY en .env.", 500)

        logger.info("Requesting analysis from model %s", self.config.model)
        try:
            resp = self.session.post(
                f"{self.config.base_url}/responses",
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                },
                json={"model": self.config.model, "input": build_input(report_text)},
                timeout=self.config.timeout_s,
            )
        except requests.RequestException as exc:
            raise CompletionError(f"OpenAI request failed: {exc}", 502) from exc

        if resp.status_code >= 400:
            raise CompletionError(f"OpenAI API error: {resp.status_code}", resp.status_code)

        try:
            payload = resp.json()
        except ValueError as exc:
            raise CompletionError("OpenAI devolvio una respuesta no JSON.", 502) from exc

        text = extract_response_text(payload)
        if not text:
            raise CompletionError("OpenAI no devolvio texto de analisis.", 502)

        return CoachAnalysis(analysis=text, metadata=prompt_metadata(report_text))
