"""
Parsers for the hydration payloads embedded in bitjita claim pages.
"""

from .literal_parser import parse_literal, parse_literal_value
from .page_extractor import extract_settlement_data, find_session_id, summarize_payload

__all__ = [
    "parse_literal",
    "parse_literal_value",
    "extract_settlement_data",
    "find_session_id",
    "summarize_payload",
]
