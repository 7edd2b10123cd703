"""Catalog construction utilities."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Protocol, Sequence, Tuple, TypeVar

from formulary.ingest.models import MedicineRecord
from formulary.ingest.normalizer import normalize_batch

from .seed import SEED_MEDICINES

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RandomSource(Protocol):
    def randrange(self, stop: int) -> int:
        ...


def shuffle(items: Sequence[T], rng: Optional[RandomSource] = None) -> List[T]:
    """Return a uniformly shuffled copy of ``items`` (Fisher-Yates)."""
    rng = rng or random.Random()
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randrange(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


@dataclass(frozen=True)
class Catalog:
    """Immutable, display-ordered set of medicine records keyed by id."""

    records: Tuple[MedicineRecord, ...] = ()
    _index: Dict[str, MedicineRecord] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index = {record.id: record for record in self.records}
        if len(index) != len(self.records):
            raise ValueError("Catalog record ids must be unique")
        object.__setattr__(self, "_index", index)

    def __iter__(self) -> Iterator[MedicineRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._index

    def get(self, record_id: str) -> Optional[MedicineRecord]:
        return self._index.get(record_id)


def merge(
    normalized: Iterable[MedicineRecord],
    seed: Iterable[MedicineRecord] = SEED_MEDICINES,
    rng: Optional[RandomSource] = None,
) -> Catalog:
    """Combine normalized labels with the curated seed list into a shuffled catalog."""
    combined: List[MedicineRecord] = list(normalized)
    combined.extend(record if record.is_common else record.model_copy(update={"is_common": True}) for record in seed)

    unique: List[MedicineRecord] = []
    seen = set()
    for record in combined:
        if record.id in seen:
            logger.warning("Dropping duplicate catalog id %s (%s)", record.id, record.brand_name)
            continue
        seen.add(record.id)
        unique.append(record)

    return Catalog(records=tuple(shuffle(unique, rng)))


def build_catalog(
    raw_records: Iterable[Mapping[str, Any]],
    seed: Iterable[MedicineRecord] = SEED_MEDICINES,
    rng: Optional[RandomSource] = None,
) -> Catalog:
    """Normalize raw labels and merge them with the seed list."""
    batch = normalize_batch(raw_records)
    catalog = merge(batch.records, seed=seed, rng=rng)
    logger.info(
        "Catalog built with %d records (%d fetched, %d skipped)",
        len(catalog),
        len(batch.records),
        len(batch.issues),
    )
    return catalog
