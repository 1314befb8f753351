from __future__ import annotations

import asyncio

import httpx
from remote_utils import ANALYZE, RecordingHandler, make_remote, raise_timeout

from intake_remote import ConcernAnalyzeRequest


def _analyze(handler, api_key: str = "test-key"):
    request = ConcernAnalyzeRequest(free_text_concern="cough and fever", locale="en-US")
    return asyncio.run(make_remote(handler, api_key=api_key).analyze_concern(request))


def test_success_parses_camel_case_payload():
    handler = RecordingHandler(
        {ANALYZE: (200, {"primaryCategory": "Cold/Flu", "candidateCategories": ["COVID-19"], "unknownField": 1})}
    )
    result = _analyze(handler)

    assert result.ok is True
    assert result.status_code == 200
    assert result.data.primary_category == "Cold/Flu"
    assert result.data.candidate_categories == ["COVID-19"]
    assert result.error is None
    assert handler.headers[0]["authorization"] == "Bearer test-key"
    assert handler.body_for(ANALYZE) == {"freeTextConcern": "cough and fever", "locale": "en-US"}


def test_no_authorization_header_without_key():
    handler = RecordingHandler({ANALYZE: (200, {"primaryCategory": "Cold/Flu"})})
    _analyze(handler, api_key="")
    assert "authorization" not in handler.headers[0]


def test_error_status_uses_provider_message():
    handler = RecordingHandler({ANALYZE: (500, {"error": {"message": "upstream down"}})})
    result = _analyze(handler)
    assert result.ok is False
    assert result.status_code == 500
    assert result.error == "http_500: upstream down"
    assert result.as_envelope()["ok"] is False


def test_redirect_is_treated_as_failure():
    def redirect(request):
        return httpx.Response(302, headers={"Location": "https://elsewhere.test/"})

    result = _analyze(RecordingHandler({ANALYZE: redirect}))
    assert result.ok is False
    assert result.error.startswith("http_302")


def test_timeout_is_reported():
    result = _analyze(RecordingHandler({ANALYZE: raise_timeout}))
    assert result.ok is False
    assert result.error == "timeout"
    assert result.status_code == 0


def test_network_error_is_reported():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = _analyze(RecordingHandler({ANALYZE: refuse}))
    assert result.ok is False
    assert result.error.startswith("network_error")


def test_invalid_json_and_schema_mismatch():
    def not_json(request):
        return httpx.Response(200, content=b"<html>oops</html>")

    assert _analyze(RecordingHandler({ANALYZE: not_json})).error == "invalid_payload"
    assert _analyze(RecordingHandler({ANALYZE: (200, {"candidateCategories": "Cold/Flu"})})).error == "invalid_payload"
    assert _analyze(RecordingHandler({ANALYZE: (200, ["Cold/Flu"])})).error == "invalid_payload"
