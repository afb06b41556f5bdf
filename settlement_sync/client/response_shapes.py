"""
Response-shape adapters for the bitjita catalog feeds.

The item and cargo endpoints have changed their envelope several times
(bare arrays, ``{items: [...]}``, ``{cargos: [...]}``, ...). Each known shape
is a named matcher; ``unwrap_feed`` tries them in order and returns the first
list found.
"""

import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple

from ..core.errors import FetchError

ShapeMatcher = Tuple[str, Callable[[Any], Optional[list]]]


def match_bare_array(payload) -> Optional[list]:
    return payload if isinstance(payload, list) else None


def match_key(key: str) -> Callable[[Any], Optional[list]]:
    """Matcher for an object envelope holding the list under ``key``."""

    def matcher(payload) -> Optional[list]:
        if isinstance(payload, dict) and isinstance(payload.get(key), list):
            return payload[key]
        return None

    return matcher


ITEM_FEED_SHAPES: List[ShapeMatcher] = [
    ("array", match_bare_array),
    ("items", match_key("items")),
    ("data", match_key("data")),
]

CARGO_FEED_SHAPES: List[ShapeMatcher] = [
    ("array", match_bare_array),
    ("cargos", match_key("cargos")),
    ("cargo", match_key("cargo")),
    ("items", match_key("items")),
]


def unwrap_feed(payload, shapes: Sequence[ShapeMatcher], feed_name: str = "feed") -> Tuple[list, str]:
    """
    Extract the record list from a feed response.

    Args:
        payload: Decoded JSON response
        shapes: Ordered matchers to try
        feed_name: Used in log and error messages

    Returns:
        Tuple of (records, name of the matching shape)

    Raises:
        FetchError: If no matcher recognizes the payload
    """
    for shape_name, matcher in shapes:
        records = matcher(payload)
        if records is not None:
            logging.debug(f"{feed_name} response matched '{shape_name}' shape ({len(records)} records)")
            return records, shape_name

    keys = list(payload.keys()) if isinstance(payload, dict) else type(payload).__name__
    raise FetchError(f"{feed_name} API returned unexpected format: {keys}")
