"""Pure query operations over a built catalog."""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterable, List, Sequence, Tuple

from formulary.ingest.models import MedicineRecord

PAGE_SIZE = 9


@dataclass(frozen=True)
class QueryState:
    """Search text and page number owned by the caller."""

    search_term: str = ""
    page: int = 1

    def with_search(self, search_term: str) -> "QueryState":
        return QueryState(search_term=search_term, page=1)

    def with_page(self, page: int) -> "QueryState":
        return replace(self, page=page)


@dataclass(frozen=True)
class Page:
    items: Tuple[MedicineRecord, ...]
    total_pages: int
    page: int


def matches(record: MedicineRecord, term: str) -> bool:
    term = term.lower()
    return (
        term in record.brand_name.lower()
        or term in record.generic_formula.lower()
        or any(term in use.lower() for use in record.uses)
    )


def filter_records(catalog: Iterable[MedicineRecord], search_term: str) -> List[MedicineRecord]:
    """Case-insensitive substring filter over brand, formula and use tags, in catalog order."""
    return [record for record in catalog if matches(record, search_term)]


def paginate(filtered: Sequence[MedicineRecord], page: int, page_size: int = PAGE_SIZE) -> Page:
    """Slice one page out of ``filtered``; pages outside the range come back empty."""
    total_pages = math.ceil(len(filtered) / page_size)
    if page < 1:
        return Page(items=(), total_pages=total_pages, page=page)
    start = (page - 1) * page_size
    return Page(items=tuple(filtered[start : start + page_size]), total_pages=total_pages, page=page)


def similar(catalog: Iterable[MedicineRecord], record: MedicineRecord) -> List[MedicineRecord]:
    """Other records sharing the exact generic formula of ``record``."""
    return [
        other
        for other in catalog
        if other.generic_formula == record.generic_formula and other.id != record.id
    ]


def run_query(catalog: Iterable[MedicineRecord], state: QueryState, page_size: int = PAGE_SIZE) -> Page:
    return paginate(filter_records(catalog, state.search_term), state.page, page_size)
