from __future__ import annotations

import math

import pytest

from formulary.ingest.models import MedicineRecord
from formulary.query.engine import QueryState, filter_records, paginate, run_query, similar


def _record(uid: str, brand: str, generic: str, *uses: str) -> MedicineRecord:
    return MedicineRecord(id=uid, brand_name=brand, generic_formula=generic, uses=uses or ("Medical Use",))


CATALOG = [
    _record("1", "Tylenol", "Paracetamol", "Minor Aches"),
    _record("2", "Advil", "Ibuprofen", "Inflammation", "Headache"),
    _record("3", "Excedrin", "Paracetamol", "Headache"),
    _record("4", "Panadol", "paracetamol", "Fever"),
]


def test_filter_matches_brand_formula_or_use_case_insensitively() -> None:
    assert [r.id for r in filter_records(CATALOG, "ADV")] == ["2"]
    assert [r.id for r in filter_records(CATALOG, "paraCET")] == ["1", "3", "4"]
    assert [r.id for r in filter_records(CATALOG, "headache")] == ["2", "3"]


def test_empty_term_matches_everything_in_order() -> None:
    assert filter_records(CATALOG, "") == CATALOG


def test_filter_without_match_is_empty() -> None:
    assert filter_records(CATALOG, "zzz") == []


@pytest.mark.parametrize("length", [0, 1, 8, 9, 10, 18, 19, 100])
def test_pagination_invariant(length: int) -> None:
    items = [_record(str(i), f"Brand {i}", "Generic") for i in range(length)]
    total_pages = math.ceil(length / 9)
    for page in range(1, total_pages + 1):
        result = paginate(items, page)
        assert result.total_pages == total_pages
        if page < total_pages:
            assert len(result.items) == 9
        else:
            assert len(result.items) == length - 9 * (total_pages - 1)
    assert paginate(items, 1).total_pages == total_pages


def test_page_beyond_range_is_empty() -> None:
    result = paginate(CATALOG, 5)
    assert result.items == ()
    assert result.total_pages == 1


def test_page_below_one_is_empty() -> None:
    assert paginate(CATALOG, 0).items == ()


def test_similar_uses_exact_formula_and_excludes_self() -> None:
    tylenol = CATALOG[0]
    assert [r.brand_name for r in similar(CATALOG, tylenol)] == ["Excedrin"]
    for record in CATALOG:
        assert record not in similar(CATALOG, record)
        for other in CATALOG:
            if other.generic_formula == record.generic_formula and other.id != record.id:
                assert other in similar(CATALOG, record)


def test_changing_search_resets_page() -> None:
    state = QueryState(search_term="para").with_page(3)
    assert state.page == 3
    state = state.with_search("para")
    assert state == QueryState(search_term="para", page=1)


def test_run_query_filters_then_paginates() -> None:
    page = run_query(CATALOG, QueryState(search_term="paracetamol"), page_size=2)
    assert [r.id for r in page.items] == ["1", "3"]
    assert page.total_pages == 2
