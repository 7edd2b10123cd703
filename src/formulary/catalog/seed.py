"""Curated list of common medicines merged into every catalog."""
from __future__ import annotations

from typing import Tuple

from formulary.ingest.models import MedicineRecord


def _seed(uid: str, brand: str, generic: str, dosage: str, *uses: str) -> MedicineRecord:
    return MedicineRecord(
        id=uid,
        brand_name=brand,
        generic_formula=generic,
        dosage=dosage,
        uses=uses,
        is_common=True,
    )


SEED_MEDICINES: Tuple[MedicineRecord, ...] = (
    _seed("c1", "Panadol", "Paracetamol", "Tablet 500mg", "Fever", "Pain Relief"),
    _seed("c2", "Advil", "Ibuprofen", "Tablet 200mg", "Inflammation", "Headache"),
    _seed("c3", "Amoxil", "Amoxicillin", "Capsule 500mg", "Bacterial Infection"),
    _seed("c4", "Zyrtec", "Cetirizine", "Tablet 10mg", "Allergies", "Hay Fever"),
    _seed("c5", "Glucophage", "Metformin", "Tablet 500mg", "Type 2 Diabetes"),
    _seed("c6", "Lipitor", "Atorvastatin", "Tablet 20mg", "High Cholesterol"),
    _seed("c7", "Zantac", "Ranitidine", "Tablet 150mg", "Acid Reflux", "Heartburn"),
    _seed("c8", "Ventolin", "Albuterol", "Inhaler", "Asthma"),
    _seed("c9", "Prinivil", "Lisinopril", "Tablet 10mg", "High Blood Pressure"),
    _seed("c10", "Synthroid", "Levothyroxine", "Tablet 50mcg", "Hypothyroidism"),
    _seed("c11", "Xanax", "Alprazolam", "Tablet 0.5mg", "Anxiety", "Panic Disorders"),
    _seed("c12", "Zoloft", "Sertraline", "Tablet 50mg", "Depression", "OCD"),
    _seed("c13", "Nexium", "Esomeprazole", "Capsule 40mg", "GERD", "Stomach Ulcers"),
    _seed("c14", "Plavix", "Clopidogrel", "Tablet 75mg", "Blood Thinner", "Stroke Prevention"),
    _seed("c15", "Singulair", "Montelukast", "Tablet 10mg", "Asthma Prevention", "Allergies"),
    _seed("c16", "Crestor", "Rosuvastatin", "Tablet 10mg", "High Cholesterol"),
    _seed("c17", "Flonase", "Fluticasone", "Nasal Spray", "Allergic Rhinitis"),
    _seed("c18", "Lexapro", "Escitalopram", "Tablet 10mg", "Depression", "Anxiety"),
    _seed("c19", "Cymbalta", "Duloxetine", "Capsule 30mg", "Nerve Pain", "Depression"),
    _seed("c20", "Lantus", "Insulin Glargine", "Injection", "Type 1 & 2 Diabetes"),
)
