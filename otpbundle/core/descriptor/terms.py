from __future__ import annotations

"""
Erlang term codec for application resource files and rebar.config.

WHY THIS FILE EXISTS:
Descriptors (`foo.app`, `foo.app.src`) and project config are written as
Erlang terms, read the same way `file:consult/1` reads them. Only the data
subset those files use is supported: atoms, strings, binaries, numbers,
tuples and proper lists.
"""

import re
from typing import Any, List

__all__ = [
    "Atom",
    "TermSyntaxError",
    "parse_terms",
    "parse_file",
    "format_term",
    "format_document",
]


RESERVED_WORDS = frozenset(
    {
        "after", "and", "andalso", "band", "begin", "bnot", "bor", "bsl", "bsr", "bxor",
        "case", "catch", "cond", "div", "else", "end", "fun", "if", "let", "maybe", "not",
        "of", "or", "orelse", "receive", "rem", "try", "when", "xor",
    }
)
_BARE_ATOM_RE = re.compile(r"[a-z][A-Za-z0-9_@]*\Z")
_ATOM_RE = re.compile(r"[a-z][A-Za-z0-9_@]*")
_NUMBER_RE = re.compile(
    r"-?(?:(?P<radix>\d{1,2})#(?P<rdigits>[0-9A-Za-z_]+)"
    r"|(?P<int>\d[\d_]*)(?P<frac>\.\d[\d_]*(?:[eE][+-]?\d+)?)?)"
)
_SIMPLE_ESCAPES = {
    "b": "\b", "d": "\x7f", "e": "\x1b", "f": "\f", "n": "\n",
    "r": "\r", "s": " ", "t": "\t", "v": "\v",
}
_FORMAT_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\t": "\\t", "\r": "\\r"}


class Atom(str):
    """An Erlang atom. Compares equal to its text."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Atom({str.__repr__(self)})"


class TermSyntaxError(ValueError):
    def __init__(self, message: str, line: int):
        super().__init__(f"line {line}: {message}")
        self.line = line


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.n = len(text)

    # ---- helpers ----
    def _line(self) -> int:
        return self.text.count("\n", 0, self.pos) + 1

    def _error(self, msg: str) -> TermSyntaxError:
        return TermSyntaxError(msg, self._line())

    def _skip_ws(self) -> None:
        while self.pos < self.n:
            ch = self.text[self.pos]
            if ch == "%":
                nl = self.text.find("\n", self.pos)
                self.pos = self.n if nl == -1 else nl + 1
            elif ch.isspace():
                self.pos += 1
            else:
                break

    def _peek(self) -> str:
        self._skip_ws()
        return self.text[self.pos] if self.pos < self.n else ""

    def _expect(self, ch: str) -> None:
        if self._peek() != ch:
            found = self.text[self.pos] if self.pos < self.n else "end of input"
            raise self._error(f"expected {ch!r}, found {found!r}")
        self.pos += 1

    # ---- entry ----
    def parse_all(self) -> List[Any]:
        out: List[Any] = []
        while self._peek():
            out.append(self._term())
            self._end_of_term()
        return out

    def _end_of_term(self) -> None:
        self._expect(".")
        if self.pos < self.n and not (self.text[self.pos].isspace() or self.text[self.pos] == "%"):
            raise self._error("expected whitespace after '.'")

    # ---- terms ----
    def _term(self) -> Any:
        ch = self._peek()
        if not ch:
            raise self._error("unexpected end of input")
        if ch == "{":
            return tuple(self._sequence("{", "}"))
        if ch == "[":
            return self._sequence("[", "]")
        if ch == '"':
            return self._strings()
        if ch == "'":
            self.pos += 1
            return Atom(self._quoted("'"))
        if ch == "<" and self.text.startswith("<<", self.pos):
            return self._binary()
        if ch == "$":
            return self._char()
        if ch == "-" or ch.isdigit():
            return self._number()
        if "a" <= ch <= "z":
            m = _ATOM_RE.match(self.text, self.pos)
            self.pos = m.end()
            return Atom(m.group(0))
        if ch.isupper() or ch == "_":
            raise self._error("variables are not allowed in consulted terms")
        raise self._error(f"unexpected character {ch!r}")

    def _sequence(self, open_ch: str, close_ch: str) -> List[Any]:
        self._expect(open_ch)
        items: List[Any] = []
        if self._peek() == close_ch:
            self.pos += 1
            return items
        while True:
            items.append(self._term())
            nxt = self._peek()
            if nxt == ",":
                self.pos += 1
                continue
            if nxt == close_ch:
                self.pos += 1
                return items
            if nxt == "|":
                raise self._error("improper lists are not supported")
            raise self._error(f"expected ',' or {close_ch!r}")

    def _strings(self) -> str:
        # Adjacent string literals concatenate ("ab" "cd").
        parts: List[str] = []
        while self._peek() == '"':
            self.pos += 1
            parts.append(self._quoted('"'))
        return "".join(parts)

    def _quoted(self, quote: str) -> str:
        buf: List[str] = []
        while True:
            if self.pos >= self.n:
                raise self._error("unterminated quoted literal")
            ch = self.text[self.pos]
            self.pos += 1
            if ch == quote:
                return "".join(buf)
            if ch == "\\":
                buf.append(self._escape())
            else:
                buf.append(ch)

    def _escape(self) -> str:
        if self.pos >= self.n:
            raise self._error("unterminated escape")
        ch = self.text[self.pos]
        self.pos += 1
        if ch in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[ch]
        if ch in "01234567":
            digits = ch
            while len(digits) < 3 and self.pos < self.n and self.text[self.pos] in "01234567":
                digits += self.text[self.pos]
                self.pos += 1
            return chr(int(digits, 8))
        if ch == "x":
            if self.text.startswith("{", self.pos):
                end = self.text.find("}", self.pos)
                if end == -1:
                    raise self._error("unterminated \\x{...} escape")
                hexdigits = self.text[self.pos + 1 : end]
                self.pos = end + 1
            else:
                hexdigits = self.text[self.pos : self.pos + 2]
                self.pos += 2
            try:
                return chr(int(hexdigits, 16))
            except ValueError:
                raise self._error(f"invalid hex escape {hexdigits!r}") from None
        if ch == "^":
            if self.pos >= self.n:
                raise self._error("unterminated control escape")
            ctl = self.text[self.pos]
            self.pos += 1
            return chr(ord(ctl) % 32)
        return ch

    def _binary(self) -> bytes:
        self.pos += 2
        if self._peek() == ">":
            self._expect_close_binary()
            return b""
        if self._peek() != '"':
            raise self._error("only string binaries are supported")
        value = self._strings()
        self._expect_close_binary()
        return value.encode("utf-8")

    def _expect_close_binary(self) -> None:
        self._skip_ws()
        if not self.text.startswith(">>", self.pos):
            raise self._error("expected '>>'")
        self.pos += 2

    def _char(self) -> int:
        self.pos += 1
        if self.pos >= self.n:
            raise self._error("unterminated character literal")
        ch = self.text[self.pos]
        self.pos += 1
        if ch == "\\":
            return ord(self._escape())
        return ord(ch)

    def _number(self) -> Any:
        m = _NUMBER_RE.match(self.text, self.pos)
        if not m:
            raise self._error("malformed number")
        self.pos = m.end()
        raw = m.group(0).replace("_", "")
        sign = -1 if raw.startswith("-") else 1
        if m.group("radix"):
            base = int(m.group("radix"))
            if not 2 <= base <= 36:
                raise self._error(f"invalid radix {base}")
            try:
                return sign * int(m.group("rdigits").replace("_", ""), base)
            except ValueError:
                raise self._error(f"invalid digits for base {base}") from None
        if m.group("frac"):
            return float(raw)
        return int(raw)


def parse_terms(text: str) -> List[Any]:
    return _Parser(text).parse_all()


def parse_file(path: str) -> List[Any]:
    with open(path, "r", encoding="utf-8") as f:
        return parse_terms(f.read())


# ---- formatting ----
def _format_atom(atom: str) -> str:
    if _BARE_ATOM_RE.match(atom) and atom not in RESERVED_WORDS:
        return atom
    return "'" + _escape_text(atom, "'") + "'"


def _escape_text(text: str, quote: str) -> str:
    out: List[str] = []
    for ch in text:
        if ch == quote:
            out.append("\\" + quote)
        elif ch in _FORMAT_ESCAPES:
            out.append(_FORMAT_ESCAPES[ch])
        elif ord(ch) < 32 or ord(ch) == 127:
            out.append(f"\\x{{{ord(ch):X}}}")
        else:
            out.append(ch)
    return "".join(out)


def _format_float(value: float) -> str:
    if value != value or value in (float("inf"), float("-inf")):
        raise ValueError(f"cannot encode non-finite float {value!r}")
    text = repr(value)
    mantissa, _, exponent = text.partition("e")
    if "." not in mantissa:
        mantissa += ".0"
    return mantissa + ("e" + exponent if exponent else "")


def format_term(term: Any) -> str:
    if isinstance(term, Atom):
        return _format_atom(term)
    if isinstance(term, bool):
        return "true" if term else "false"
    if isinstance(term, str):
        return '"' + _escape_text(term, '"') + '"'
    if isinstance(term, bytes):
        if not term:
            return "<<>>"
        return '<<"' + _escape_text(term.decode("utf-8"), '"') + '">>'
    if isinstance(term, int):
        return str(term)
    if isinstance(term, float):
        return _format_float(term)
    if isinstance(term, tuple):
        return "{" + ",".join(format_term(t) for t in term) + "}"
    if isinstance(term, list):
        return "[" + ",".join(format_term(t) for t in term) + "]"
    raise TypeError(f"cannot encode {type(term).__name__} as an Erlang term")


def format_document(term: Any) -> str:
    """
    Render one top-level term followed by the `.` terminator.

    `{Tag, Name, [Props]}` terms put each property on its own line, aligned
    under the name, the way application resource files are usually laid out.
    """
    if (
        isinstance(term, tuple)
        and len(term) == 3
        and isinstance(term[2], list)
        and len(term[2]) > 1
    ):
        pad = " " * (len(format_term(term[0])) + 2)
        head = "{" + format_term(term[0]) + "," + format_term(term[1]) + ","
        props = (",\n" + pad + " ").join(format_term(p) for p in term[2])
        return head + "\n" + pad + "[" + props + "]}.\n"
    return format_term(term) + ".\n"
