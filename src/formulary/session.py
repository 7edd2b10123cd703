"""Per-session application context tying the catalog, query state and enrichment together."""
from __future__ import annotations

from typing import List, Optional

from formulary.ai.enrichment import EnrichmentController
from formulary.catalog.builder import Catalog, RandomSource, build_catalog
from formulary.ingest.models import MedicineRecord
from formulary.ingest.openfda import OpenFDAClient
from formulary.query.engine import PAGE_SIZE, Page, QueryState, run_query, similar


class LibrarySession:
    """Holds one read-only catalog plus the caller's search, page and selection."""

    def __init__(self, catalog: Catalog, controller: EnrichmentController, page_size: int = PAGE_SIZE) -> None:
        self.catalog = catalog
        self.controller = controller
        self.page_size = page_size
        self.state = QueryState()
        self.selected: Optional[MedicineRecord] = None

    def search(self, search_term: str) -> Page:
        self.state = self.state.with_search(search_term)
        self.controller.on_search_changed(search_term)
        return self.current_page()

    def go_to_page(self, page: int) -> Page:
        self.state = self.state.with_page(page)
        return self.current_page()

    def current_page(self) -> Page:
        return run_query(self.catalog, self.state, self.page_size)

    def page_numbers(self) -> List[int]:
        return list(range(1, self.current_page().total_pages + 1))

    def select(self, record_id: Optional[str]) -> Optional[MedicineRecord]:
        if record_id is None:
            self.selected = None
        else:
            record = self.catalog.get(record_id)
            if record is None:
                raise KeyError(record_id)
            self.selected = record
        self.controller.on_selection_changed(self.selected)
        return self.selected

    def similar_to_selected(self) -> List[MedicineRecord]:
        if self.selected is None:
            return []
        return similar(self.catalog, self.selected)


def load_session(
    source: OpenFDAClient,
    controller: EnrichmentController,
    rng: Optional[RandomSource] = None,
    limit: Optional[int] = None,
) -> LibrarySession:
    """Fetch labels once and build the session catalog; SourceUnavailable propagates."""
    raw_records = source.fetch_labels(limit=limit)
    catalog = build_catalog(raw_records, rng=rng)
    return LibrarySession(catalog, controller)
