"""Consent-calendar detection - one policy per source, kept independent

Commissioners Court numbers its consent block above 900, so the county flags
by sequence or title. The school district and METRO only mark consent in the
title text.
"""

import re
from typing import Any, Optional

CONSENT_PATTERN = re.compile(r"consent", re.IGNORECASE)

COUNTY_CONSENT_SEQUENCE_THRESHOLD = 900


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def is_consent_by_title(title: Optional[str]) -> bool:
    """Title mentions consent (case-insensitive)"""
    return bool(CONSENT_PATTERN.search(title or ""))


def is_consent_by_sequence_or_title(
    title: Optional[str],
    sequence: Any,
    threshold: int = COUNTY_CONSENT_SEQUENCE_THRESHOLD
) -> bool:
    """Sequence above the threshold, or title mentions consent"""
    return _as_int(sequence) > threshold or is_consent_by_title(title)
