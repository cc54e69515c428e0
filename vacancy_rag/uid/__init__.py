# vacancy_rag/uid/__init__.py
"""UID derivation and batch annotation."""

from vacancy_rag.uid.annotator import AnnotatedRow, AnnotationResult, annotate_rows
from vacancy_rag.uid.deriver import (
    ParsedUID,
    derive_property_code,
    derive_uid,
    is_valid_uid,
    parse_uid,
)

__all__ = [
    "AnnotatedRow",
    "AnnotationResult",
    "ParsedUID",
    "annotate_rows",
    "derive_property_code",
    "derive_uid",
    "is_valid_uid",
    "parse_uid",
]
