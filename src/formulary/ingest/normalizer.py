"""Normalization of raw openFDA label records into catalog entries."""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from formulary.processing.text import extract_use_phrases

from .models import LabelBatch, MedicineRecord

logger = logging.getLogger(__name__)

UNKNOWN_BRAND = "Unknown Brand"
UNKNOWN_GENERIC = "Unknown Generic"
DEFAULT_DOSAGE = "Oral"
USE_TEXT_FIELDS = ("purpose", "indications_and_usage")


def _first(value: Any) -> Optional[str]:
    """Return the first usable string from a label field that may be a list, a string or missing."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    text = str(value)
    return text or None


def _openfda_field(raw: Mapping[str, Any], name: str) -> Optional[str]:
    openfda = raw.get("openfda")
    if not isinstance(openfda, Mapping):
        return None
    return _first(openfda.get(name))


def _use_text(raw: Mapping[str, Any]) -> Optional[str]:
    for field_name in USE_TEXT_FIELDS:
        text = _first(raw.get(field_name))
        if text:
            return text
    return None


def normalize(raw: Mapping[str, Any], position: int) -> Optional[MedicineRecord]:
    """Map one raw label onto a MedicineRecord, or None when it has no brand name."""
    brand_name = _openfda_field(raw, "brand_name") or UNKNOWN_BRAND
    if brand_name == UNKNOWN_BRAND:
        return None

    return MedicineRecord(
        id=_first(raw.get("id")) or str(position),
        brand_name=brand_name,
        generic_formula=_openfda_field(raw, "generic_name") or UNKNOWN_GENERIC,
        dosage=_openfda_field(raw, "route") or DEFAULT_DOSAGE,
        uses=tuple(extract_use_phrases(_use_text(raw))),
    )


def normalize_batch(raw_records: Iterable[Mapping[str, Any]], source_name: str = "openfda") -> LabelBatch:
    """Normalize a batch of raw labels, recording why rejected entries were skipped."""
    records: List[MedicineRecord] = []
    issues: List[str] = []

    for idx, raw in enumerate(raw_records):
        record = normalize(raw, idx)
        if record is None:
            issues.append(f"Record {idx} missing brand name; skipped")
            continue
        records.append(record)

    if issues:
        logger.debug("Skipped %d of %d %s records", len(issues), len(records) + len(issues), source_name)
    return LabelBatch(source_name=source_name, records=records, issues=issues)
