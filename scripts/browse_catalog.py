"""Browse the medicine catalog and its AI enrichment from the command line."""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer

from formulary.ai.enrichment import EnrichmentController, SlotSnapshot, SlotState
from formulary.ai.llm import ChatCompletionClient
from formulary.ingest.models import MedicineRecord
from formulary.ingest.openfda import OpenFDAClient, SourceUnavailable
from formulary.session import LibrarySession, load_session

app = typer.Typer(help="Search openFDA-backed medicine labels and ask for AI summaries")


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")


def _load(llm: ChatCompletionClient, limit: int) -> LibrarySession:
    # One-shot commands have no typing to debounce.
    controller = EnrichmentController(llm, debounce_s=0)
    try:
        return load_session(OpenFDAClient(), controller, limit=limit)
    except SourceUnavailable as exc:
        typer.secho(
            "Could not establish connection to the FDA Database. Please try again later.",
            fg=typer.colors.RED,
        )
        logging.error("Catalog load failed: %s", exc)
        raise typer.Exit(code=1)


def _print_record(record: MedicineRecord) -> None:
    marker = " *" if record.is_common else ""
    typer.echo(f"[{record.id}] {record.brand_name}{marker} - {record.generic_formula} ({record.dosage})")
    typer.echo(f"    uses: {', '.join(record.uses)}")


def _print_enrichment(snapshot: SlotSnapshot) -> None:
    if snapshot.state is SlotState.IDLE or not snapshot.text:
        return
    colour = typer.colors.RED if snapshot.state is SlotState.FAILED else typer.colors.CYAN
    typer.secho(snapshot.text, fg=colour)


@app.command()
def search(
    term: str = typer.Argument("", help="Symptom, generic formula or brand"),
    page: int = typer.Option(1, min=1, help="Results page to show"),
    summarize: bool = typer.Option(True, help="Ask the AI for a short summary of the search"),
    limit: int = typer.Option(100, min=1, help="Number of labels to fetch"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Filter the catalog and print one page of results."""
    configure_logging(verbose)

    llm = ChatCompletionClient()
    session = _load(llm, limit)

    async def _run() -> None:
        try:
            if summarize:
                session.search(term)
            else:
                session.state = session.state.with_search(term)
            result = session.go_to_page(page)
            typer.secho(f"Page {page} of {result.total_pages}", fg=typer.colors.GREEN)
            for record in result.items:
                _print_record(record)
            await session.controller.drain()
            _print_enrichment(session.controller.search_slot.snapshot())
        finally:
            await llm.aclose()

    asyncio.run(_run())


@app.command()
def show(
    query: str = typer.Argument(..., help="Record id or exact brand name"),
    explain: bool = typer.Option(True, help="Ask the AI to explain the medicine"),
    limit: int = typer.Option(100, min=1, help="Number of labels to fetch"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Show one record, its same-formula alternatives and an AI explanation."""
    configure_logging(verbose)

    llm = ChatCompletionClient()
    session = _load(llm, limit)
    record = session.catalog.get(query) or next(
        (r for r in session.catalog if r.brand_name.lower() == query.lower()), None
    )
    if record is None:
        typer.secho(f"No medicine matching {query!r}", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)

    async def _run() -> None:
        try:
            if explain:
                session.select(record.id)
            else:
                session.selected = record
            _print_record(record)
            alternatives = session.similar_to_selected()
            typer.secho(f"{len(alternatives)} alternative(s) with the same formula", fg=typer.colors.GREEN)
            for other in alternatives:
                _print_record(other)
            await session.controller.drain()
            _print_enrichment(session.controller.detail_slot.snapshot())
        finally:
            await llm.aclose()

    asyncio.run(_run())


@app.command()
def dump(
    output: Optional[Path] = typer.Option(None, help="Optional path to write the catalog JSON"),
    limit: int = typer.Option(100, min=1, help="Number of labels to fetch"),
) -> None:
    """Build a catalog and dump it as JSON."""
    session = _load(ChatCompletionClient(), limit)
    payload = json.dumps([record.model_dump(mode="json") for record in session.catalog], indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload, encoding="utf-8")
        typer.secho(f"Catalog written to {output}", fg=typer.colors.GREEN)
    else:
        typer.echo(payload)


if __name__ == "__main__":  # pragma: no cover
    app()
