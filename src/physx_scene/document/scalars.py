"""Whitespace-separated scalar lists as serialized by the physics engine."""

from typing import Optional
from xml.etree.ElementTree import Element

import numpy as np


def element_text(element: Optional[Element]) -> str:
    """Return the stripped text content of an element, or "" if missing."""
    if element is None:
        return ""
    return "".join(element.itertext()).strip()


def _to_float(token: str) -> float:
    try:
        return float(token)
    except ValueError:
        return float("nan")


def parse_scalars(text: Optional[str]) -> np.ndarray:
    """Parse whitespace-separated numeric text into a float array.

    Tokens that are not numbers become NaN instead of raising, so a
    malformed field degrades the result rather than aborting the decode.
    Callers are responsible for checking the length of the result.

    Args:
        text: Raw field text. None is treated as empty.

    Returns:
        1-D float64 array, in token order.
    """
    if not text:
        return np.empty(0, dtype=np.float64)

    return np.array([_to_float(token) for token in text.split()], dtype=np.float64)


def parse_id(text: Optional[str]) -> Optional[int]:
    """Parse an integer object id.

    Returns:
        The id, or None if the text is empty or not an integer.
    """
    if not text:
        return None

    text = text.strip()
    try:
        return int(text)
    except ValueError:
        pass

    # Some writers emit ids as "12.0"
    value = _to_float(text)
    if not np.isfinite(value) or value != int(value):
        return None
    return int(value)
