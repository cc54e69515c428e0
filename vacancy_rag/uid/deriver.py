# vacancy_rag/uid/deriver.py
"""
Deterministic UID derivation for unit rows.

A UID is the conflict key for upserts and the one persisted format that
must stay bit-exact across deployments:

    {PropertyCode}_{UnitToken}

- PropertyCode: one letter followed by digits, taken from the start of the
  property label and uppercased ("s0002 - 101 Maple" -> "S0002").
- UnitToken: the unit label with all whitespace removed, case preserved
  ("1 N" -> "1N").

Examples:
    >>> derive_uid("S0002 - 101 Maple", "D2")
    'S0002_D2'
    >>> derive_uid("S0020 - Oak Plaza", "1 N")
    'S0020_1N'
    >>> is_valid_uid("S0002-D2")
    False

derive_uid() does not run is_valid_uid() on its output: a unit label with
punctuation ("A-1") yields a UID the validator rejects. Stored data may
already hold such UIDs, so the annotator only filters them when asked to
(strict mode).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import UID

logger = get_logger(__name__)

# ASCII digits only; fullmatch keeps a trailing newline out of valid UIDs
PROPERTY_CODE_PATTERN = re.compile(r"^([A-Za-z][0-9]+)")
UID_PATTERN = re.compile(r"[A-Za-z][0-9]+_[A-Za-z0-9]+")
UID_SEPARATOR = "_"

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ParsedUID:
    """A valid UID split into its components."""

    property_code: str
    unit_token: str
    uid: str


def derive_property_code(label: Any) -> Optional[str]:
    """
    Extract the property code from the start of a property label.

    Accepts both "S0002 - 101 Maple" and a bare "S0002"; the same
    leading-pattern rule covers both.

    Args:
        label: Raw property label

    Returns:
        Uppercased property code, or None if the label is empty, not a
        string, or doesn't start with a letter followed by digits.
    """
    if not label or not isinstance(label, str):
        return None

    match = PROPERTY_CODE_PATTERN.match(label.strip())
    if match is None:
        return None

    return match.group(1).upper()


def derive_uid(property_label: Any, unit_label: Any) -> Optional[str]:
    """
    Derive the UID for a row from its property and unit labels.

    Never raises; returns None so batch processing can continue.

    Args:
        property_label: Raw property label (e.g., "S0002 - 101 Maple")
        unit_label: Raw unit label (e.g., "D2", " 1 N ")

    Returns:
        UID string, or None if either part can't be derived.
    """
    code = derive_property_code(property_label)
    if code is None:
        logger.warning(f"{UID} Could not extract property code from: {property_label!r}")
        return None

    if not unit_label or not isinstance(unit_label, str):
        logger.warning(f"{UID} Invalid unit label for property {code}: {unit_label!r}")
        return None

    unit_token = _WHITESPACE.sub("", unit_label)
    if not unit_token:
        logger.warning(f"{UID} Blank unit label for property {code}")
        return None

    return f"{code}{UID_SEPARATOR}{unit_token}"


def is_valid_uid(candidate: Any) -> bool:
    """
    Check that the whole candidate matches [A-Za-z][0-9]+_[A-Za-z0-9]+.

    Non-string values are never valid.
    """
    if not candidate or not isinstance(candidate, str):
        return False

    return UID_PATTERN.fullmatch(candidate) is not None


def parse_uid(uid: Any) -> Optional[ParsedUID]:
    """
    Split a valid UID into property code and unit token.

    Returns:
        ParsedUID, or None if the UID is invalid.
    """
    if not is_valid_uid(uid):
        return None

    property_code, unit_token = uid.split(UID_SEPARATOR, 1)
    return ParsedUID(property_code=property_code, unit_token=unit_token, uid=uid)


__all__ = [
    "PROPERTY_CODE_PATTERN",
    "UID_PATTERN",
    "ParsedUID",
    "derive_property_code",
    "derive_uid",
    "is_valid_uid",
    "parse_uid",
]
