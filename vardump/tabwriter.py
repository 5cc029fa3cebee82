"""
Elastic tabstop column alignment for dump output.

Text is buffered until flush(). Each line is split into cells at tab characters; a
cell terminated by a tab belongs to a column, the trailing cell of a line does not.
Tab-terminated cells at the same column index in consecutive lines form a column
block, and every cell of a block is padded to the block's widest cell plus padding.
A line with fewer cells ends the blocks it cannot continue.

Widths are measured with a caller-supplied function so invisible markup (ANSI escapes,
HTML spans) does not push columns apart.

Example:
    >>> import io
    >>> out = io.StringIO()
    >>> tw = TabWriter(out)
    >>> tw.write("+a\\t=> 1\\n+long\\t=> 2\\n")
    >>> tw.flush()
    >>> print(out.getvalue())
    +a    => 1
    +long => 2
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Callable, TextIO


# Classes --------------------------------------------------------------------------------------------------------------

class TabWriter:
    """
    Buffering writer that aligns tab-separated cells into columns on flush().

    Args:
        sink: Text stream receiving the formatted output.
        minwidth: Minimal column width, padding included.
        padding: Spaces added to the widest cell of a column block.
        padchar: Character used for padding.
        width: Function measuring the visible width of a cell.
    """

    def __init__(self,
                 sink: TextIO,
                 minwidth: int = 0,
                 padding: int = 1,
                 padchar: str = " ",
                 width: Callable[[str], int] = len):
        if not isinstance(minwidth, int) or minwidth < 0:
            raise ValueError(f"minwidth must be a non-negative int, but got {minwidth!r}")
        if not isinstance(padding, int) or padding < 0:
            raise ValueError(f"padding must be a non-negative int, but got {padding!r}")
        if not isinstance(padchar, str) or len(padchar) != 1:
            raise ValueError(f"padchar must be a single character, but got {padchar!r}")

        self.sink = sink
        self.minwidth = minwidth
        self.padding = padding
        self.padchar = padchar
        self.width = width
        self._buffer: list[str] = []

    def write(self, text: str) -> int:
        self._buffer.append(text)
        return len(text)

    def flush(self) -> None:
        """Format everything written so far and write it to the sink."""
        text = "".join(self._buffer)
        self._buffer.clear()
        if text:
            self.sink.write(self.format(text))
        flush = getattr(self.sink, "flush", None)
        if callable(flush):
            flush()

    def format(self, text: str) -> str:
        """Return text with its tab-separated cells aligned, without touching the buffer."""
        lines = [line.split("\t") for line in text.split("\n")]
        out: list[str] = []
        self._format(out, lines, [], 0, len(lines))
        return "\n".join(out)

    # Private Methods ------------------------------------------------------------------------------------------------

    def _format(self, out: list[str], lines: list[list[str]], widths: list[int], line0: int, line1: int) -> None:
        column = len(widths)
        this = line0
        while this < line1:
            if column >= len(lines[this]) - 1:
                this += 1
                continue

            # A cell exists in this column: flush the lines above the block start
            self._write_lines(out, lines, widths, line0, this)
            line0 = this

            width = self.minwidth
            while this < line1 and column < len(lines[this]) - 1:
                width = max(width, self.width(lines[this][column]) + self.padding)
                this += 1

            self._format(out, lines, widths + [width], line0, this)
            line0 = this

        self._write_lines(out, lines, widths, line0, line1)

    def _write_lines(self, out: list[str], lines: list[list[str]], widths: list[int], line0: int, line1: int) -> None:
        for cells in lines[line0:line1]:
            parts = []
            for j, cell in enumerate(cells):
                parts.append(cell)
                if j < len(widths):
                    parts.append(self.padchar * (widths[j] - self.width(cell)))
            out.append("".join(parts))
