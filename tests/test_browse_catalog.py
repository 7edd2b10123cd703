from __future__ import annotations

import importlib.util
from pathlib import Path
from typing import Any, List

import pytest
from typer.testing import CliRunner

from formulary.ai.llm import ChatCompletionClient
from formulary.ingest.openfda import OpenFDAClient

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "browse_catalog.py"
RAW_LABELS = [
    {"id": "fda-tylenol", "openfda": {"brand_name": ["Tylenol"], "generic_name": ["Paracetamol"]}},
]

runner = CliRunner()


def _load_cli() -> Any:
    spec = importlib.util.spec_from_file_location("browse_catalog", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def closed(monkeypatch: pytest.MonkeyPatch) -> List[bool]:
    calls: List[bool] = []

    async def fake_complete(self, messages, *, temperature, max_tokens):
        return "Quick tip."

    async def fake_aclose(self) -> None:
        calls.append(True)

    monkeypatch.setattr(OpenFDAClient, "fetch_labels", lambda self, limit=None: RAW_LABELS)
    monkeypatch.setattr(ChatCompletionClient, "complete", fake_complete)
    monkeypatch.setattr(ChatCompletionClient, "aclose", fake_aclose)
    return calls


def test_search_prints_results_and_summary(closed: List[bool]) -> None:
    cli = _load_cli()
    result = runner.invoke(cli.app, ["search", "paracetamol"])
    assert result.exit_code == 0, result.output
    assert "Tylenol" in result.output
    assert "Quick tip." in result.output
    assert closed == [True]


def test_llm_client_closed_when_command_fails(closed: List[bool], monkeypatch: pytest.MonkeyPatch) -> None:
    cli = _load_cli()

    def broken_print(record: Any) -> None:
        raise RuntimeError("render failed")

    monkeypatch.setattr(cli, "_print_record", broken_print)
    result = runner.invoke(cli.app, ["show", "Tylenol"])
    assert isinstance(result.exception, RuntimeError)
    assert closed == [True]


def test_show_unknown_medicine_exits_before_event_loop(closed: List[bool]) -> None:
    cli = _load_cli()
    result = runner.invoke(cli.app, ["show", "Nothing"])
    assert result.exit_code == 1
    assert "No medicine matching" in result.output
    assert closed == []
