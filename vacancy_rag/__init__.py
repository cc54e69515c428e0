# vacancy_rag/__init__.py
"""
vacancy_rag - CSV unit-vacancy ingestion with UID-based upserts and
similarity retrieval.

Usage:
    from vacancy_rag import derive_uid, annotate_rows

    derive_uid("S0002 - 101 Maple", "D2")  # "S0002_D2"
"""

from vacancy_rag.uid import annotate_rows, derive_property_code, derive_uid, is_valid_uid

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "annotate_rows",
    "derive_property_code",
    "derive_uid",
    "is_valid_uid",
]
