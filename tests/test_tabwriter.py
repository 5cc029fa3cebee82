#
# Vardump - TabWriter Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import io

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from vardump.colors import strip_ansi
from vardump.tabwriter import TabWriter


# Helpers --------------------------------------------------------------------------------------------------------------

def fmt(text, **kwargs):
    out = io.StringIO()
    tw = TabWriter(out, **kwargs)
    tw.write(text)
    tw.flush()
    return out.getvalue()


# Tests ----------------------------------------------------------------------------------------------------------------

class TestTabWriter:
    def test_aligns_block(self):
        assert fmt("a\t1\nlong\t2\n") == "a    1\nlong 2\n"

    def test_trailing_cell_not_padded(self):
        assert fmt("a\tx\nbb\tyyyy\n") == "a  x\nbb yyyy\n"

    def test_block_ends_at_line_without_cell(self):
        text = "a\t1\nbreak\nlonger\t2\n"
        assert fmt(text) == "a 1\nbreak\nlonger 2\n"

    def test_nested_columns(self):
        text = "a\tb\tc\naa\tbb\tcc\n"
        assert fmt(text) == "a  b  c\naa bb cc\n"

    def test_no_tabs_untouched(self):
        text = "[\n  0 => 1\n]\n"
        assert fmt(text) == text

    def test_padding_and_minwidth(self):
        assert fmt("a\tb\n", padding=2) == "a  b\n"
        assert fmt("a\tb\n", minwidth=4) == "a   b\n"

    def test_padchar(self):
        assert fmt("a\tb\nccc\td\n", padchar=".") == "a...b\nccc.d\n"

    def test_width_function_ignores_markup(self):
        text = "\x1b[33ma\x1b[0m\t1\nlong\t2\n"
        out = fmt(text, width=lambda cell: len(strip_ansi(cell)))
        assert strip_ansi(out) == "a    1\nlong 2\n"

    def test_flush_empties_buffer(self):
        out = io.StringIO()
        tw = TabWriter(out)
        tw.write("x\n")
        tw.flush()
        tw.flush()
        assert out.getvalue() == "x\n"

    def test_format_leaves_buffer(self):
        tw = TabWriter(io.StringIO())
        assert tw.format("a\tb\n") == "a b\n"

    @pytest.mark.parametrize(
        "kwargs",
        [
            pytest.param({"minwidth": -1}, id="minwidth"),
            pytest.param({"padding": -1}, id="padding"),
            pytest.param({"padchar": "ab"}, id="padchar"),
        ],
    )
    def test_invalid_settings(self, kwargs):
        with pytest.raises(ValueError):
            TabWriter(io.StringIO(), **kwargs)
