from __future__ import annotations

from typing import Any, Dict, List

import pytest
import requests

from formulary.ingest.openfda import BRAND_FILTER, OpenFDAClient, SourceUnavailable


class _FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload
        self.text = text

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def test_fetch_labels_requests_branded_records(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[Dict[str, Any]] = []

    def fake_get(url: str, params: Dict[str, Any], timeout: Any) -> _FakeResponse:
        calls.append({"url": url, "params": params})
        return _FakeResponse(200, {"results": [{"id": "a"}, {"id": "b"}]})

    monkeypatch.setattr("formulary.ingest.openfda.requests.get", fake_get)
    client = OpenFDAClient(base_url="https://fda.test/drug/label.json")

    assert client.fetch_labels(limit=100) == [{"id": "a"}, {"id": "b"}]
    assert calls == [
        {"url": "https://fda.test/drug/label.json", "params": {"search": BRAND_FILTER, "limit": 100}}
    ]


def test_missing_results_is_empty(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "formulary.ingest.openfda.requests.get", lambda url, params, timeout: _FakeResponse(200, {"meta": {}})
    )
    assert OpenFDAClient(base_url="https://fda.test").fetch_labels() == []


def test_error_status_raises_source_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "formulary.ingest.openfda.requests.get",
        lambda url, params, timeout: _FakeResponse(503, text="maintenance"),
    )
    with pytest.raises(SourceUnavailable, match="503"):
        OpenFDAClient(base_url="https://fda.test").fetch_labels()


def test_transport_error_raises_source_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_get(url: str, params: Dict[str, Any], timeout: Any) -> _FakeResponse:
        raise requests.ConnectionError("offline")

    monkeypatch.setattr("formulary.ingest.openfda.requests.get", fake_get)
    with pytest.raises(SourceUnavailable):
        OpenFDAClient(base_url="https://fda.test").fetch_labels()
