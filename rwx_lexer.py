"""
RWX Lexer
Splits an RWX text buffer into logical lines and scans numbers and words on a line.
"""

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional

from rwx_types import RWXParseError


WHITESPACE = ' \t\r\n\f\v'
NUMBER_CHARS = '0123456789+-.eE'

_LINE_RE = re.compile(r'([^\r\n]*)(?:\r\n|\r|\n)')
BYTE_ORDER_MARK = '\ufeff'


@dataclass(frozen=True)
class SourceLine:
    lineno: int
    text: str


def _raw_lines(buffer: str) -> Iterator[str]:
    """Lines without their \\n, \\r\\n or \\r terminator"""
    pos = 0
    for match in _LINE_RE.finditer(buffer):
        yield match.group(1)
        pos = match.end()
    if pos < len(buffer):
        yield buffer[pos:]


def iter_lines(buffer: str) -> Iterator[SourceLine]:
    """
    Yield the non-blank, non-comment lines of the buffer, numbered from 1.
    Single forward pass over the buffer. A leading byte-order mark is dropped and
    everything from the first '#' on a line is a comment.
    """
    if buffer.startswith(BYTE_ORDER_MARK):
        buffer = buffer[len(BYTE_ORDER_MARK):]
    for lineno, text in enumerate(_raw_lines(buffer), start=1):
        text = text.split('#', 1)[0]
        stripped = text.strip(WHITESPACE)
        if not stripped:
            continue
        yield SourceLine(lineno, stripped)


class LineScanner:
    """Cursor over a single line"""

    def __init__(self, text: str, lineno: Optional[int] = None, path: Optional[str] = None):
        self.text = text
        self.p = 0
        self.end = len(text)
        self.lineno = lineno
        self.path = path

    def error(self, message: str) -> RWXParseError:
        return RWXParseError(message, self.lineno, self.path)

    def skip_spaces(self):
        while self.p < self.end and self.text[self.p] in WHITESPACE:
            self.p += 1

    def at_end(self) -> bool:
        self.skip_spaces()
        return self.p >= self.end

    def _token_end(self) -> int:
        q = self.p
        while q < self.end and self.text[q] not in WHITESPACE:
            q += 1
        return q

    def peek_word(self) -> str:
        self.skip_spaces()
        return self.text[self.p:self._token_end()]

    def read_word(self, what: str = 'word') -> str:
        self.skip_spaces()
        if self.p >= self.end:
            raise self.error(f"{what} expected")
        q = self._token_end()
        word = self.text[self.p:q]
        self.p = q
        return word

    def read_float(self, what: str = 'number') -> float:
        """Read a floating point token, advancing past it"""
        self.skip_spaces()
        start = self.p
        q = self.p
        while q < self.end and self.text[q] in NUMBER_CHARS:
            q += 1
        if q == start:
            raise self.error(f"{what} expected, found '{self.peek_word()}'" if self.p < self.end else f"{what} expected")
        if q < self.end and self.text[q] not in WHITESPACE:
            raise self.error(f"malformed {what} '{self.text[start:self._token_end()]}'")
        try:
            value = float(self.text[start:q])
        except ValueError:
            raise self.error(f"malformed {what} '{self.text[start:q]}'") from None
        self.p = q
        return value

    def read_uint(self, what: str = 'integer') -> int:
        """Read an unsigned decimal integer token, advancing past it"""
        self.skip_spaces()
        start = self.p
        q = self.p
        while q < self.end and self.text[q].isdigit():
            q += 1
        if q == start:
            raise self.error(f"{what} expected, found '{self.peek_word()}'" if self.p < self.end else f"{what} expected")
        if q < self.end and self.text[q] not in WHITESPACE:
            raise self.error(f"malformed {what} '{self.text[start:self._token_end()]}'")
        self.p = q
        return int(self.text[start:q])

    def read_floats(self, count: int, what: str = 'number') -> List[float]:
        return [self.read_float(what) for _ in range(count)]

    def match_keyword(self, keyword: str) -> bool:
        """Consume the next word if it equals keyword, ignoring case"""
        if self.peek_word().lower() != keyword:
            return False
        self.p = self._token_end()
        return True

    def read_rest(self) -> List[str]:
        """Consume all remaining words on the line"""
        words = []
        while not self.at_end():
            words.append(self.read_word())
        return words
