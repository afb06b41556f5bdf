"""
Tolerant parser for the JavaScript literal subset found in SvelteKit
hydration scripts.

The claim page embeds its data as executable code (``resolve({...})`` and
``kit.start(app, element, {...})`` calls). This module recovers plain Python
values from those arguments without executing anything: objects with bare or
quoted keys, arrays, strings, numbers, trailing commas, ``void 0`` and the
handful of constructors devalue emits. Anything else is a PayloadParseError.
"""

import re
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

from ..errors import PayloadParseError

_IDENTIFIER = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
_NUMBER = re.compile(r"0[xX][0-9a-fA-F]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_KEYWORDS = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
    "NaN": float("nan"),
    "Infinity": float("inf"),
}


def _format_js_date(epoch_ms: float) -> str:
    """Render epoch milliseconds the way Date.prototype.toISOString does."""
    dt = datetime.fromtimestamp(epoch_ms / 1000.0, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


class _LiteralParser:
    """Recursive-descent parser over a single source string."""

    def __init__(self, text: str, pos: int = 0, session_id: Optional[str] = None):
        self.text = text
        self.pos = pos
        self.session_var = f"__sveltekit_{session_id}" if session_id else None

    # ---- low level helpers ----

    def _error(self, message: str):
        raise PayloadParseError(message, self.pos)

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _skip_whitespace(self):
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch.isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end == -1 else end + 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end == -1:
                    self._error("Unterminated comment")
                self.pos = end + 2
            else:
                break

    def _expect(self, ch: str):
        self._skip_whitespace()
        if self._peek() != ch:
            found = self._peek() or "end of input"
            self._error(f"Expected '{ch}' but found '{found}'")
        self.pos += 1

    def _read_identifier(self) -> str:
        match = _IDENTIFIER.match(self.text, self.pos)
        if not match:
            self._error("Expected identifier")
        self.pos = match.end()
        return match.group(0)

    # ---- grammar ----

    def parse_value(self) -> Any:
        self._skip_whitespace()
        ch = self._peek()

        if not ch:
            self._error("Unexpected end of input")
        if ch == "{":
            return self._parse_object()
        if ch == "[":
            return self._parse_array()
        if ch in ("'", '"'):
            return self._parse_string(ch)
        if ch == "`":
            return self._parse_template()
        if ch in "-+":
            return self._parse_signed()
        if ch.isdigit() or ch == ".":
            return self._parse_number()
        if _IDENTIFIER.match(ch):
            return self._parse_identifier_expression()

        self._error(f"Unexpected character '{ch}'")

    def _parse_object(self) -> dict:
        self.pos += 1
        result = {}
        while True:
            self._skip_whitespace()
            if self._peek() == "}":
                self.pos += 1
                return result

            key = self._parse_key()
            self._expect(":")
            result[key] = self.parse_value()

            self._skip_whitespace()
            ch = self._peek()
            if ch == ",":
                self.pos += 1
            elif ch == "}":
                self.pos += 1
                return result
            else:
                self._error(f"Expected ',' or '}}' in object but found '{ch or 'end of input'}'")

    def _parse_key(self) -> str:
        ch = self._peek()
        if ch in ("'", '"'):
            return self._parse_string(ch)
        if ch.isdigit() or ch == ".":
            number = self._parse_number()
            return str(number)
        return self._read_identifier()

    def _parse_array(self) -> list:
        self.pos += 1
        result = []
        while True:
            self._skip_whitespace()
            if self._peek() == "]":
                self.pos += 1
                return result
            if self._peek() == ",":
                self._error("Array holes are not supported")

            result.append(self.parse_value())

            self._skip_whitespace()
            ch = self._peek()
            if ch == ",":
                self.pos += 1
            elif ch == "]":
                self.pos += 1
                return result
            else:
                self._error(f"Expected ',' or ']' in array but found '{ch or 'end of input'}'")

    def _parse_string(self, quote: str) -> str:
        self.pos += 1
        chunks = []
        text = self.text
        while True:
            if self.pos >= len(text):
                self._error("Unterminated string")
            ch = text[self.pos]
            if ch == quote:
                self.pos += 1
                return "".join(chunks)
            if ch == "\\":
                chunks.append(self._parse_escape())
                continue
            if ch == "\n":
                self._error("Newline in string literal")
            chunks.append(ch)
            self.pos += 1

    def _parse_escape(self) -> str:
        self.pos += 1
        if self.pos >= len(self.text):
            self._error("Unterminated escape sequence")
        ch = self.text[self.pos]
        self.pos += 1

        if ch in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[ch]
        if ch == "\n":
            # line continuation
            return ""
        if ch == "x":
            return self._read_hex_escape(2)
        if ch == "u":
            if self._peek() == "{":
                end = self.text.find("}", self.pos)
                if end == -1:
                    self._error("Unterminated unicode escape")
                code = self.text[self.pos + 1 : end]
                self.pos = end + 1
                try:
                    return chr(int(code, 16))
                except ValueError:
                    self._error(f"Invalid unicode escape '{code}'")
            return self._read_hex_escape(4)
        return ch

    def _read_hex_escape(self, length: int) -> str:
        digits = self.text[self.pos : self.pos + length]
        try:
            if len(digits) != length:
                raise ValueError(digits)
            value = int(digits, 16)
        except ValueError:
            self._error(f"Invalid hex escape '{digits}'")
        self.pos += length
        return chr(value)

    def _parse_template(self) -> str:
        self.pos += 1
        chunks = []
        text = self.text
        while True:
            if self.pos >= len(text):
                self._error("Unterminated template literal")
            ch = text[self.pos]
            if ch == "`":
                self.pos += 1
                return "".join(chunks)
            if ch == "\\":
                chunks.append(self._parse_escape())
                continue
            if text.startswith("${", self.pos):
                self._error("Template substitutions are not supported")
            chunks.append(ch)
            self.pos += 1

    def _parse_signed(self) -> Any:
        sign = -1 if self._peek() == "-" else 1
        self.pos += 1
        self._skip_whitespace()
        if self.text.startswith("Infinity", self.pos):
            self.pos += len("Infinity")
            return sign * float("inf")
        value = self._parse_number()
        return -value if sign < 0 else value

    def _parse_number(self):
        match = _NUMBER.match(self.text, self.pos)
        if not match:
            self._error("Invalid number")
        raw = match.group(0)
        self.pos = match.end()

        # BigInt literal suffix
        if self._peek() == "n" and raw.isdigit():
            self.pos += 1
            return int(raw)

        if raw[:2] in ("0x", "0X"):
            return int(raw, 16)
        if any(c in raw for c in ".eE"):
            return float(raw)
        return int(raw)

    def _parse_arguments(self) -> List[Any]:
        self._expect("(")
        args = []
        while True:
            self._skip_whitespace()
            if self._peek() == ")":
                self.pos += 1
                return args
            args.append(self.parse_value())
            self._skip_whitespace()
            ch = self._peek()
            if ch == ",":
                self.pos += 1
            elif ch == ")":
                self.pos += 1
                return args
            else:
                self._error(f"Expected ',' or ')' in call but found '{ch or 'end of input'}'")

    def _parse_identifier_expression(self) -> Any:
        name = self._read_identifier()

        if name in _KEYWORDS:
            return _KEYWORDS[name]
        if name == "void":
            self.parse_value()
            return None
        if name == "new":
            self._skip_whitespace()
            return self._parse_constructor(self._read_identifier())
        if name == "BigInt":
            args = self._parse_arguments()
            try:
                return int(args[0])
            except (IndexError, TypeError, ValueError):
                self._error("Invalid BigInt argument")

        if self.session_var and name == self.session_var:
            self._skip_whitespace()
            if self._peek() == ".":
                self.pos += 1
                member = self._read_identifier()
                if member == "defer":
                    args = self._parse_arguments()
                    return f"__DEFERRED_{args[0] if args else ''}__"
                self._error(f"Unsupported call {name}.{member}")

        self._error(f"Unsupported identifier '{name}'")

    def _parse_constructor(self, name: str) -> Any:
        args = self._parse_arguments()
        if name == "Date":
            if not args:
                self._error("new Date() without arguments is not a literal")
            arg = args[0]
            if isinstance(arg, (int, float)):
                return _format_js_date(arg)
            return str(arg)
        if name == "Set":
            return list(args[0]) if args and args[0] is not None else []
        if name == "Map":
            entries = args[0] if args and args[0] is not None else []
            try:
                return {key: value for key, value in entries}
            except (TypeError, ValueError):
                self._error("Map entries must be [key, value] pairs")
        self._error(f"Unsupported constructor '{name}'")


def parse_literal(text: str, start: int = 0, session_id: Optional[str] = None) -> Tuple[Any, int]:
    """
    Parse one literal value starting at ``start``.

    Args:
        text: Source text (typically a whole HTML page)
        start: Offset where the value begins
        session_id: The page's SvelteKit session token; enables
            ``__sveltekit_<id>.defer(n)`` placeholders

    Returns:
        Tuple of (parsed value, offset just past the value)

    Raises:
        PayloadParseError: If the text at ``start`` is not a supported literal
    """
    parser = _LiteralParser(text, start, session_id)
    value = parser.parse_value()
    return value, parser.pos


def parse_literal_value(text: str, session_id: Optional[str] = None) -> Any:
    """Parse a string that must contain exactly one literal value."""
    parser = _LiteralParser(text, 0, session_id)
    value = parser.parse_value()
    parser._skip_whitespace()
    if parser.pos != len(text):
        parser._error("Unexpected trailing content")
    return value
