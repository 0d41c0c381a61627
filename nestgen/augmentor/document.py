"""Structured view of a TypeScript source file.

``SourceDocument`` is a token-level scanner, not a full TypeScript parser.  It
understands just enough structure to edit a NestJS composition root safely:

* top-level ``import`` declarations and their module specifiers,
* top-level classes and the decorators attached to them,
* object literals passed as decorator arguments, their ``key: value``
  properties, and array literals used as property values.

Edits are recorded as text insertions at offsets of the original source and
applied on serialisation, so everything outside the inserted text stays
byte-for-byte identical.  A document with no edits serialises to exactly the
text it was parsed from.

Known limitation: regular-expression literals are scanned as punctuation, so
a regex containing quotes or unbalanced brackets makes the file unparsable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from nestgen.errors import UnparsableTargetError
from nestgen.filesystem import FileSystem


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

class TokenKind(str, Enum):
    IDENT = "ident"
    STRING = "string"
    TEMPLATE = "template"
    NUMBER = "number"
    PUNCT = "punct"
    COMMENT = "comment"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    start: int
    end: int

    def is_punct(self, char: str) -> bool:
        return self.kind is TokenKind.PUNCT and self.value == char

    def is_ident(self, name: str | None = None) -> bool:
        return self.kind is TokenKind.IDENT and (name is None or self.value == name)


_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}
_MODIFIERS = {"export", "default", "abstract", "declare"}


def _is_ident_start(char: str) -> bool:
    return char.isalpha() or char in "_$"


def _is_ident_part(char: str) -> bool:
    return char.isalnum() or char in "_$"


def tokenize(text: str, path: str | Path | None = None) -> list[Token]:
    """Split *text* into tokens with source offsets (whitespace dropped).

    Raises:
        UnparsableTargetError: On an unterminated string, template literal,
            or block comment.
    """
    tokens: list[Token] = []
    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        if char.isspace():
            i += 1
            continue

        start = i
        if text.startswith("//", i):
            newline = text.find("\n", i)
            i = length if newline == -1 else newline
            if i > start and text[i - 1] == "\r":
                i -= 1
            tokens.append(Token(TokenKind.COMMENT, text[start:i], start, i))
        elif text.startswith("/*", i):
            close = text.find("*/", i + 2)
            if close == -1:
                raise UnparsableTargetError(
                    f"Unterminated block comment at offset {start}", path=path
                )
            i = close + 2
            tokens.append(Token(TokenKind.COMMENT, text[start:i], start, i))
        elif char in "'\"":
            i = _skip_string(text, i, path)
            tokens.append(Token(TokenKind.STRING, text[start:i], start, i))
        elif char == "`":
            i = _skip_template(text, i, path)
            tokens.append(Token(TokenKind.TEMPLATE, text[start:i], start, i))
        elif _is_ident_start(char):
            i += 1
            while i < length and _is_ident_part(text[i]):
                i += 1
            tokens.append(Token(TokenKind.IDENT, text[start:i], start, i))
        elif char.isdigit():
            i += 1
            while i < length and (text[i].isalnum() or text[i] in "._"):
                i += 1
            tokens.append(Token(TokenKind.NUMBER, text[start:i], start, i))
        else:
            i += 1
            tokens.append(Token(TokenKind.PUNCT, char, start, i))
    return tokens


def _skip_string(text: str, i: int, path: str | Path | None) -> int:
    """Return the offset just past the quoted string starting at *i*."""
    quote = text[i]
    j = i + 1
    while j < len(text):
        char = text[j]
        if char == "\\":
            j += 3 if text.startswith("\r\n", j + 1) else 2
            continue
        if char == quote:
            return j + 1
        if char == "\n":
            break
        j += 1
    raise UnparsableTargetError(f"Unterminated string literal at offset {i}", path=path)


def _skip_template(text: str, i: int, path: str | Path | None) -> int:
    """Return the offset just past the template literal starting at *i*."""
    j = i + 1
    while j < len(text):
        char = text[j]
        if char == "\\":
            j += 2
        elif char == "`":
            return j + 1
        elif text.startswith("${", j):
            j = _skip_substitution(text, j + 2, path)
        else:
            j += 1
    raise UnparsableTargetError(f"Unterminated template literal at offset {i}", path=path)


def _skip_substitution(text: str, j: int, path: str | Path | None) -> int:
    depth = 1
    while j < len(text):
        char = text[j]
        if char in "'\"":
            j = _skip_string(text, j, path)
        elif char == "`":
            j = _skip_template(text, j, path)
        elif char == "{":
            depth += 1
            j += 1
        elif char == "}":
            depth -= 1
            j += 1
            if depth == 0:
                return j
        else:
            j += 1
    raise UnparsableTargetError("Unterminated template substitution", path=path)


# ---------------------------------------------------------------------------
# Syntax nodes
# ---------------------------------------------------------------------------
#
# Nodes refer to positions in ``SourceDocument.code`` (the token list without
# comments); ``start``/``end`` attributes are offsets into the source text.

@dataclass(frozen=True)
class ImportDeclaration:
    specifier: str
    start: int
    end: int
    quote: str
    has_semicolon: bool


@dataclass(frozen=True)
class Element:
    """One element of an array literal."""
    text: str
    first: int
    last: int


@dataclass
class ArrayLiteral:
    document: "SourceDocument"
    open: int
    close: int

    @property
    def elements(self) -> list[Element]:
        doc = self.document
        result: list[Element] = []
        for first, last in doc._split(self.open + 1, self.close):
            if first > last:
                continue
            text = doc.source[doc.code[first].start:doc.code[last].end].strip()
            result.append(Element(text=text, first=first, last=last))
        return result

    @property
    def has_trailing_comma(self) -> bool:
        return self.close - 1 > self.open and self.document.code[self.close - 1].is_punct(",")

    def contains(self, text: str) -> bool:
        """Exact textual match against every element; no normalisation."""
        return any(element.text == text for element in self.elements)


@dataclass
class PropertyAssignment:
    document: "SourceDocument"
    key: str
    value_first: int
    value_last: int

    def array_value(self) -> ArrayLiteral | None:
        """Return the value as an array literal, or ``None`` for any other value."""
        code = self.document.code
        if self.value_first > self.value_last:
            return None
        if not code[self.value_first].is_punct("["):
            return None
        if self.document.match.get(self.value_first) != self.value_last:
            return None
        return ArrayLiteral(self.document, self.value_first, self.value_last)


@dataclass
class ObjectLiteral:
    document: "SourceDocument"
    open: int
    close: int

    @property
    def properties(self) -> list[PropertyAssignment]:
        """``key: value`` members; shorthand, spread, and method members are skipped."""
        doc = self.document
        members: list[PropertyAssignment] = []
        for first, last in doc._split(self.open + 1, self.close):
            if last - first < 1:
                continue
            key_token = doc.code[first]
            if not doc.code[first + 1].is_punct(":"):
                continue
            if key_token.kind is TokenKind.IDENT:
                key = key_token.value
            elif key_token.kind is TokenKind.STRING:
                key = key_token.value[1:-1]
            else:
                continue
            members.append(PropertyAssignment(doc, key, first + 2, last))
        return members

    def get_property(self, name: str) -> PropertyAssignment | None:
        for prop in self.properties:
            if prop.key == name:
                return prop
        return None


@dataclass
class Decorator:
    document: "SourceDocument"
    name: str
    start: int
    end: int
    args_open: int | None = None
    args_close: int | None = None

    @property
    def arguments(self) -> list[tuple[int, int]]:
        """``(first, last)`` code-token ranges of each call argument."""
        if self.args_open is None or self.args_close is None:
            return []
        return [
            (first, last)
            for first, last in self.document._split(self.args_open + 1, self.args_close)
            if first <= last
        ]

    def config_object(self) -> ObjectLiteral | None:
        """Return the first argument if it is an object literal."""
        args = self.arguments
        if not args:
            return None
        first, last = args[0]
        doc = self.document
        if doc.code[first].is_punct("{") and doc.match.get(first) == last:
            return ObjectLiteral(doc, first, last)
        return None


@dataclass
class ClassDeclaration:
    name: str | None
    exported: bool
    start: int
    end: int
    decorators: list[Decorator] = field(default_factory=list)

    def get_decorator(self, name: str) -> Decorator | None:
        for decorator in self.decorators:
            if decorator.name == name:
                return decorator
        return None


# ---------------------------------------------------------------------------
# SourceDocument
# ---------------------------------------------------------------------------


class SourceDocument:
    """Queryable, editable token model of one TypeScript file."""

    def __init__(self, source: str, path: str | Path | None = None) -> None:
        self.source = source
        self.path = Path(path) if path is not None else None
        self.tokens = tokenize(source, path)
        self.code = [t for t in self.tokens if t.kind is not TokenKind.COMMENT]
        self.match = self._match_brackets()
        self.imports: list[ImportDeclaration] = []
        self.classes: list[ClassDeclaration] = []
        self._scan_top_level()
        self._edits: list[tuple[int, int, str]] = []

    # -- Construction ------------------------------------------------------

    @classmethod
    def parse(cls, source: str, path: str | Path | None = None) -> "SourceDocument":
        return cls(source, path)

    @classmethod
    def load(cls, path: str | Path, filesystem: FileSystem | None = None) -> "SourceDocument":
        fs = filesystem or FileSystem()
        return cls(fs.read_text(path), path)

    # -- Queries -----------------------------------------------------------

    def find_class(self, name: str) -> ClassDeclaration | None:
        for declaration in self.classes:
            if declaration.name == name:
                return declaration
        return None

    def has_import(self, specifier: str) -> bool:
        """True when any import declaration uses exactly *specifier*."""
        return any(imp.specifier == specifier for imp in self.imports)

    # -- Edits -------------------------------------------------------------

    @property
    def modified(self) -> bool:
        return bool(self._edits)

    @property
    def text(self) -> str:
        """The source with every pending insertion applied."""
        if not self._edits:
            return self.source
        pieces: list[str] = []
        cursor = 0
        for offset, _, insertion in sorted(self._edits):
            pieces.append(self.source[cursor:offset])
            pieces.append(insertion)
            cursor = offset
        pieces.append(self.source[cursor:])
        return "".join(pieces)

    def add_import(self, names: list[str], specifier: str) -> None:
        """Append ``import { names } from 'specifier'`` after the last import.

        Quote style and semicolon usage follow the last existing import.
        """
        newline = self._newline
        if self.imports:
            last = self.imports[-1]
            quote, semicolon = last.quote, last.has_semicolon
        else:
            quote, semicolon = "'", True
        statement = f"import {{ {', '.join(names)} }} from {quote}{specifier}{quote}"
        if semicolon:
            statement += ";"

        if self.imports:
            offset = self._after_trailing_comment(self.imports[-1].end)
            self._insert(offset, newline + statement)
        else:
            self._insert(0, statement + newline)

    def append_element(self, array: ArrayLiteral, text: str) -> None:
        """Append *text* as the last element of *array*, following its layout."""
        code = self.code
        elements = array.elements
        if not elements:
            self._insert(code[array.open].end, text)
            return

        last = elements[-1]
        last_end = code[last.last].end
        previous_end = code[elements[-2].last].end if len(elements) > 1 else code[array.open].end
        vertical = "\n" in self.source[previous_end:code[last.first].start]
        if not vertical:
            self._insert(last_end, f", {text}")
            return

        newline = self._newline
        indent = self._indent_at(code[last.first].start)
        if array.has_trailing_comma:
            anchor = code[array.close - 1].end
            self._insert(self._after_trailing_comment(anchor), f"{newline}{indent}{text},")
            return

        offset = self._after_trailing_comment(last_end)
        if offset == last_end:
            self._insert(last_end, f",{newline}{indent}{text}")
        else:
            self._insert(last_end, ",")
            self._insert(offset, f"{newline}{indent}{text}")

    # -- Internals ---------------------------------------------------------

    def _insert(self, offset: int, text: str) -> None:
        self._edits.append((offset, len(self._edits), text))

    @property
    def _newline(self) -> str:
        return "\r\n" if "\r\n" in self.source else "\n"

    def _indent_at(self, offset: int) -> str:
        line_start = self.source.rfind("\n", 0, offset) + 1
        line = self.source[line_start:offset]
        return line[: len(line) - len(line.lstrip(" \t"))]

    def _after_trailing_comment(self, offset: int) -> int:
        """Skip a comment that follows *offset* on the same line."""
        for token in self.tokens:
            if token.start < offset:
                continue
            between = self.source[offset:token.start]
            if token.kind is TokenKind.COMMENT and "\n" not in between:
                offset = token.end
                continue
            break
        return offset

    def _match_brackets(self) -> dict[int, int]:
        match: dict[int, int] = {}
        stack: list[int] = []
        for index, token in enumerate(self.code):
            if token.kind is not TokenKind.PUNCT:
                continue
            if token.value in _OPENERS:
                stack.append(index)
            elif token.value in _CLOSERS:
                if not stack or _OPENERS[self.code[stack[-1]].value] != token.value:
                    raise UnparsableTargetError(
                        f"Unbalanced '{token.value}' at offset {token.start}", path=self.path
                    )
                match[stack.pop()] = index
        if stack:
            opener = self.code[stack[-1]]
            raise UnparsableTargetError(
                f"Unclosed '{opener.value}' at offset {opener.start}", path=self.path
            )
        return match

    def _split(self, lo: int, hi: int) -> list[tuple[int, int]]:
        """Split code tokens ``[lo, hi)`` on top-level commas into ``(first, last)`` ranges.

        Empty segments come back with ``first > last``.
        """
        segments: list[tuple[int, int]] = []
        first = lo
        i = lo
        while i < hi:
            token = self.code[i]
            if token.is_punct(","):
                segments.append((first, i - 1))
                first = i + 1
            elif i in self.match:
                i = self.match[i]
            i += 1
        if first < hi:
            segments.append((first, hi - 1))
        return segments

    def _scan_top_level(self) -> None:
        code = self.code
        pending: list[Decorator] = []
        exported = False
        i = 0
        while i < len(code):
            token = code[i]

            if token.is_ident("import") and not self._is_call_or_member(i + 1):
                i = self._scan_import(i)
                pending, exported = [], False
                continue

            if token.is_punct("@") and i + 1 < len(code) and code[i + 1].kind is TokenKind.IDENT:
                decorator, i = self._scan_decorator(i)
                pending.append(decorator)
                continue

            if token.kind is TokenKind.IDENT and token.value in _MODIFIERS:
                exported = exported or token.value == "export"
                i += 1
                continue

            if token.is_ident("class"):
                i = self._scan_class(i, pending, exported)
                pending, exported = [], False
                continue

            pending, exported = [], False
            i = self.match[i] + 1 if i in self.match else i + 1

    def _is_call_or_member(self, index: int) -> bool:
        return index < len(self.code) and (
            self.code[index].is_punct("(") or self.code[index].is_punct(".")
        )

    def _scan_import(self, i: int) -> int:
        code = self.code
        j = i + 1
        while j < len(code):
            token = code[j]
            if token.kind is TokenKind.STRING:
                end = token.end
                has_semicolon = j + 1 < len(code) and code[j + 1].is_punct(";")
                if has_semicolon:
                    end = code[j + 1].end
                self.imports.append(
                    ImportDeclaration(
                        specifier=token.value[1:-1],
                        start=code[i].start,
                        end=end,
                        quote=token.value[0],
                        has_semicolon=has_semicolon,
                    )
                )
                return j + 2 if has_semicolon else j + 1
            if token.is_punct(";") or token.is_punct("="):
                # ``import x = require(...)`` and other non-module forms.
                return j + 1
            j = self.match[j] + 1 if j in self.match else j + 1
        return j

    def _scan_decorator(self, i: int) -> tuple[Decorator, int]:
        code = self.code
        parts = [code[i + 1].value]
        j = i + 2
        while (
            j + 1 < len(code)
            and code[j].is_punct(".")
            and code[j + 1].kind is TokenKind.IDENT
        ):
            parts.append(code[j + 1].value)
            j += 2
        decorator = Decorator(self, ".".join(parts), code[i].start, code[j - 1].end)
        if j < len(code) and code[j].is_punct("("):
            close = self.match[j]
            decorator.args_open, decorator.args_close = j, close
            decorator.end = code[close].end
            j = close + 1
        return decorator, j

    def _scan_class(self, i: int, decorators: list[Decorator], exported: bool) -> int:
        code = self.code
        name = None
        if i + 1 < len(code) and code[i + 1].kind is TokenKind.IDENT:
            name = code[i + 1].value
        j = i + 1
        angle = 0
        while j < len(code):
            # Skip type arguments and heritage clauses; stop at the body.
            token = code[j]
            if token.is_punct("{") and angle == 0:
                break
            if token.is_punct("<"):
                angle += 1
            elif token.is_punct(">") and angle:
                angle -= 1
            elif j in self.match:
                j = self.match[j]
            j += 1
        if j >= len(code):
            return j
        close = self.match[j]
        start = decorators[0].start if decorators else code[i].start
        self.classes.append(
            ClassDeclaration(
                name=name,
                exported=exported,
                start=start,
                end=code[close].end,
                decorators=list(decorators),
            )
        )
        return close + 1
