"""Reference renderer for testing -- lays a whole line out from scratch.

``RenderedLine`` walks the prompt and the text cell by cell with no caching
and answers cursor queries by linear scan, so it can be compared with the
incremental ``LayoutCache``.
"""

from __future__ import annotations

from pi.layout import LayoutCache, Position, Span, byte_len, segment


class RenderedLine:
    """Prompt and text rendered on a ``columns`` wide screen.

    Parameters
    ----------
    prompt:
        Prompt text, drawn from the top left corner.
    text:
        Edited text, drawn right after the prompt.
    columns:
        Screen width. Graphemes that do not fit on the rest of a row move
        wholly to the next one.
    """

    def __init__(self, prompt: str, text: str, columns: int, tab_stop: int = 8) -> None:
        self.columns = columns
        self.tab_stop = tab_stop
        self.prompt_cells, self.prompt_end = self._walk(prompt, 0, 0)
        self.cells, self.end = self._walk(text, self.prompt_end.col, self.prompt_end.row)

    def _walk(self, s: str, col: int, row: int) -> tuple[list[tuple[int, int, Position]], Position]:
        cells: list[tuple[int, int, Position]] = []
        for offset, _, width in segment(s, self.tab_stop):
            if width == 0:
                continue
            used = min(width, self.columns)
            if col + used > self.columns:
                col, row = 0, row + 1
            cells.append((offset, width, Position(col, row)))
            col += used
            if col == self.columns:
                col, row = 0, row + 1
        return cells, Position(col, row)

    def cursor_position(self, idx: int) -> Position:
        if idx == 0 or not self.cells:
            return self.prompt_end
        for n, (offset, _, pos) in enumerate(self.cells):
            if offset >= idx:
                if offset == idx or n > 0:
                    return pos
                return self.prompt_end
        return self.end


def snapshot(cache: LayoutCache) -> tuple[list[tuple[int, int, Position]], list[tuple[int, int, Position]]]:
    """Plain ``(idx, width, pos)`` copies of the prompt and text entries."""
    return (
        [(e.idx, e.width, e.pos) for e in cache.prompt],
        [(e.idx, e.width, e.pos) for e in cache.text],
    )


class EditSession:
    """A text buffer and the ``LayoutCache`` following it.

    Every edit changes ``buffer`` first and then reports it to the cache,
    which reads the buffer back through its text source. Arguments are code
    point indices into ``buffer``.
    """

    def __init__(self, columns: int, prompt: str = "", tab_stop: int = 8, text: str = "") -> None:
        self.prompt = prompt
        self.buffer = text
        self.cache = LayoutCache(tab_stop, text_source=lambda: self.buffer)
        self.cache.window_resized(columns, 24)
        self.cache.prompt_updated(prompt)
        self.cache.rebuild_text(text)

    def insert(self, at: int, new: str) -> Span:
        idx = byte_len(self.buffer[:at])
        self.buffer = self.buffer[:at] + new + self.buffer[at:]
        return self.cache.insert(idx, new)

    def delete(self, start: int, end: int) -> Span:
        idx, old = byte_len(self.buffer[:start]), self.buffer[start:end]
        self.buffer = self.buffer[:start] + self.buffer[end:]
        return self.cache.delete(idx, old)

    def replace(self, start: int, end: int, new: str) -> Span:
        idx, old = byte_len(self.buffer[:start]), self.buffer[start:end]
        self.buffer = self.buffer[:start] + new + self.buffer[end:]
        return self.cache.replace(idx, old, new)

    def rendered(self) -> RenderedLine:
        return RenderedLine(self.prompt, self.buffer, self.cache.columns, self.cache.tab_stop)
