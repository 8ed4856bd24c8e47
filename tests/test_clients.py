import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from dotareport.analysis import MatchAnalysisRequest, MatchAnalysisUseCase
from dotareport.coach_client import CoachClient, CompletionError, extract_response_text
from dotareport.config import CacheConfig, CompletionConfig, OpenDotaConfig
from dotareport.opendota_client import (
    MatchNotFoundError,
    OpenDotaClient,
    ProviderUnavailableError,
    RateLimitedError,
    is_valid_match_id,
)
from dotareport.prompts import COACH_SYSTEM_PROMPT


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, responses: Dict[str, List[FakeResponse]]) -> None:
        self.responses = responses
        self.calls: List[str] = []
        self.posts: List[Dict[str, Any]] = []

    def get(self, url: str, timeout: Optional[int] = None) -> FakeResponse:
        self.calls.append(url)
        for suffix, queue in self.responses.items():
            if url.endswith(suffix):
                return queue.pop(0) if len(queue) > 1 else queue[0]
        return FakeResponse(404)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.posts.append({"url": url, **kwargs})
        self.calls.append(url)
        return self.get(url)


def _opendota(session: FakeSession, tmp_path: Optional[Path] = None) -> OpenDotaClient:
    cache = CacheConfig(enabled=tmp_path is not None, base_dir=tmp_path or Path("."), ttl_s=60)
    config = OpenDotaConfig(base_url="https://opendota.test/api", timeout_s=5, cache=cache)
    return OpenDotaClient(config=config, backoff_s=0.0, session=session)


def _coach(session: FakeSession, api_key: str = "sk-test") -> CoachClient:
    config = CompletionConfig(api_key=api_key, model="gpt-test", base_url="https://llm.test/v1", timeout_s=5)
    return CoachClient(config=config, session=session)


def test_match_id_validation() -> None:
    assert is_valid_match_id("7412345678")
    assert is_valid_match_id(" 12345678 ")
    assert not is_valid_match_id("1234567")
    assert not is_valid_match_id("abc12345678")


def test_fetch_match_maps_status_codes() -> None:
    client = _opendota(FakeSession({"/matches/12345678": [FakeResponse(404)]}))
    with pytest.raises(MatchNotFoundError) as exc:
        client.fetch_match("12345678")
    assert exc.value.status == 404

    client = _opendota(FakeSession({"/matches/12345678": [FakeResponse(429)]}))
    with pytest.raises(RateLimitedError):
        client.fetch_match("12345678")

    session = FakeSession({"/matches/12345678": [FakeResponse(503)]})
    with pytest.raises(ProviderUnavailableError):
        _opendota(session).fetch_match("12345678")
    assert len(session.calls) == 3


def test_fetch_match_retries_then_succeeds() -> None:
    session = FakeSession(
        {"/matches/12345678": [FakeResponse(502), FakeResponse(200, {"match_id": 12345678})]}
    )
    assert _opendota(session).fetch_match("12345678") == {"match_id": 12345678}
    assert len(session.calls) == 2


def test_name_lookups_parse_constants(tmp_path: Path) -> None:
    session = FakeSession(
        {
            "/constants/items": [
                FakeResponse(200, {"blink": {"id": 1, "dname": "Blink Dagger"}, "recipe_x": {"id": 0}})
            ],
            "/constants/heroes": [FakeResponse(200, {"1": {"id": 1, "localized_name": "Anti-Mage"}})],
        }
    )
    client = _opendota(session, tmp_path)
    assert client.item_names() == {1: "Blink Dagger"}
    assert client.hero_names() == {1: "Anti-Mage"}
    # second lookup is served from the on-disk cache
    assert client.item_names() == {1: "Blink Dagger"}
    assert sum(1 for c in session.calls if c.endswith("/constants/items")) == 1


def test_extract_response_text() -> None:
    assert extract_response_text({"output_text": "  hola  "}) == "hola"
    payload = {"output": [{"content": [{"text": "uno"}, {"text": " "}]}, {"content": [{"text": "dos"}]}]}
    assert extract_response_text(payload) == "uno\n\ndos"
    assert extract_response_text(None) == ""


def test_coach_client_requires_key_and_text() -> None:
    with pytest.raises(CompletionError) as exc:
        _coach(FakeSession({}), api_key="").complete("report")
    assert exc.value.status == 500

    with pytest.raises(CompletionError) as exc:
        _coach(FakeSession({"/responses": [FakeResponse(200, {"output": []})]})).complete("report")
    assert exc.value.status == 502

    with pytest.raises(CompletionError) as exc:
        _coach(FakeSession({"/responses": [FakeResponse(401)]})).complete("report")
    assert exc.value.status == 401


def test_coach_client_sends_system_prompt() -> None:
    session = FakeSession({"/responses": [FakeResponse(200, {"output_text": "Resultado: Ganada"})]})
    result = _coach(session).complete("# Dota 2 Match Report")
    assert result.analysis == "Resultado: Ganada"
    assert result.metadata.startswith("system_prompt:\n" + COACH_SYSTEM_PROMPT)
    body = session.posts[0]["json"]
    assert body["model"] == "gpt-test"
    assert body["input"][0] == {"role": "system", "content": COACH_SYSTEM_PROMPT}
    assert body["input"][1]["content"] == "# Dota 2 Match Report"


def test_use_case_builds_report_and_analysis() -> None:
    opendota = _opendota(
        FakeSession(
            {
                "/matches/12345678": [FakeResponse(200, {"match_id": 12345678, "players": []})],
                "/constants/items": [FakeResponse(200, {})],
                "/constants/heroes": [FakeResponse(200, {})],
            }
        )
    )
    coach = _coach(FakeSession({"/responses": [FakeResponse(200, {"output_text": "ok"})]}))
    use_case = MatchAnalysisUseCase(opendota, opendota, coach)

    result = use_case.execute(MatchAnalysisRequest(match_id="12345678", focus_hero_id=1))
    assert result.success
    assert result.analysis == "ok"
    assert "- Match ID: 12345678" in (result.report_text or "")

    bad = use_case.execute(MatchAnalysisRequest(match_id="42"))
    assert not bad.success
    assert bad.status == 400


def test_use_case_reports_provider_errors() -> None:
    opendota = _opendota(FakeSession({"/matches/12345678": [FakeResponse(404)]}))
    result = MatchAnalysisUseCase(opendota, opendota).execute(MatchAnalysisRequest(match_id="12345678"))
    assert not result.success
    assert result.status == 404
    assert result.error == "Match no encontrado. Revisa el match_id."


def _html_body() -> json.JSONDecodeError:
    return json.JSONDecodeError("Expecting value", "<html>Bad Gateway</html>", 0)


def test_non_json_match_body_is_a_failed_result() -> None:
    opendota = _opendota(FakeSession({"/matches/12345678": [FakeResponse(200, _html_body())]}))
    result = MatchAnalysisUseCase(opendota, opendota).execute(MatchAnalysisRequest(match_id="12345678"))
    assert not result.success
    assert result.status == 502
    assert result.error == "Respuesta inesperada de OpenDota."


def test_non_json_completion_body_raises_completion_error() -> None:
    session = FakeSession({"/responses": [FakeResponse(200, _html_body())]})
    with pytest.raises(CompletionError) as exc:
        _coach(session).complete("report")
    assert exc.value.status == 502


def test_unreadable_cache_file_is_refetched(tmp_path: Path) -> None:
    session = FakeSession({"/constants/items": [FakeResponse(200, {"blink": {"id": 1, "dname": "Blink Dagger"}})]})
    client = _opendota(session, tmp_path)
    client._cache_path("/constants/items").write_text("{not json", encoding="utf-8")

    assert client.item_names() == {1: "Blink Dagger"}
    assert len(session.calls) == 1
    assert client.item_names() == {1: "Blink Dagger"}
    assert len(session.calls) == 1


def test_use_case_logs_failure_with_arguments(caplog: pytest.LogCaptureFixture) -> None:
    opendota = _opendota(FakeSession({"/matches/12345678": [FakeResponse(404)]}))
    with caplog.at_level("ERROR", logger="dotareport.analysis"):
        MatchAnalysisUseCase(opendota, opendota).execute(MatchAnalysisRequest(match_id="12345678"))
    record = caplog.records[-1]
    assert record.msg == "Match analysis failed for %s: %s"
    assert record.args[0] == "12345678"
    assert isinstance(record.args[1], MatchNotFoundError)
    assert record.getMessage() == "Match analysis failed for 12345678: Match no encontrado. Revisa el match_id."
