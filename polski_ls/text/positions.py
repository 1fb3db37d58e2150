from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based line and UTF-16 column, as the editor protocol counts them."""

    line: int
    character: int


def utf16_length(text: str) -> int:
    return sum(2 if ord(ch) > 0xFFFF else 1 for ch in text)


class LineIndex:
    """Maps code-point offsets in ``text`` to and from editor positions."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.line_starts = [0]
        for offset, ch in enumerate(text):
            if ch == "\n":
                self.line_starts.append(offset + 1)

    def _line_bounds(self, line: int) -> tuple[int, int]:
        start = self.line_starts[line]
        if line + 1 < len(self.line_starts):
            end = self.line_starts[line + 1] - 1
        else:
            end = len(self.text)
        return start, end

    def position_at(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self.text)))
        line = bisect_right(self.line_starts, offset) - 1
        line_start = self.line_starts[line]
        return Position(line=line, character=utf16_length(self.text[line_start:offset]))

    def offset_at(self, position: Position) -> int:
        if position.line < 0:
            return 0
        if position.line >= len(self.line_starts):
            return len(self.text)

        start, end = self._line_bounds(position.line)
        units = 0
        for offset in range(start, end):
            if units >= position.character:
                return offset
            units += utf16_length(self.text[offset])
        return end

    def is_out_of_bounds(self, position: Position) -> bool:
        if position.line < 0 or position.line >= len(self.line_starts):
            return True
        start, end = self._line_bounds(position.line)
        return position.character > utf16_length(self.text[start:end])
