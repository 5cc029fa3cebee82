#
# Vardump - Colors Tests
#

# Third-party ----------------------------------------------------------------------------------------------------------
import colorama
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
import vardump.colors as colors
from vardump.colors import (
    ANSI_CODES,
    ANSI_RESET,
    AnsiBackend,
    ColorBackend,
    HtmlBackend,
    Role,
    color_enabled,
    detect_color,
    set_color_enabled,
    strip_ansi,
)


# Tests ----------------------------------------------------------------------------------------------------------------

class TestDetectColor:
    @pytest.mark.parametrize(
        "environ, expected",
        [
            pytest.param({}, True, id="default-on"),
            pytest.param({"NO_COLOR": "1"}, False, id="no_color"),
            pytest.param({"NO_COLOR": ""}, True, id="no_color-empty"),
            pytest.param({"FORCE_COLOR": "1"}, True, id="force_color"),
            pytest.param({"NO_COLOR": "1", "FORCE_COLOR": "1"}, False, id="no_color-wins"),
        ],
    )
    def test_detect(self, environ, expected):
        assert detect_color(environ) is expected

    def test_lazy_detection(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        assert color_enabled() is False

    def test_override(self):
        set_color_enabled(False)
        assert color_enabled() is False
        set_color_enabled(True)
        assert color_enabled() is True

    def test_override_rejects_non_bool(self):
        with pytest.raises(TypeError):
            set_color_enabled("yes")

    def test_enabling_prepares_windows_console(self, monkeypatch):
        calls = []
        monkeypatch.setattr(colorama, "just_fix_windows_console", lambda: calls.append(1))
        set_color_enabled(True)
        set_color_enabled(False)
        assert calls == [1]


class TestAnsiBackend:
    def test_colorize(self):
        out = AnsiBackend(True).colorize(Role.NUMBER, "7")
        assert out == f"{ANSI_CODES['number']}7{ANSI_RESET}"
        assert strip_ansi(out) == "7"

    def test_string_role_and_unknown_role(self):
        backend = AnsiBackend(True)
        assert backend.colorize("muted", "x") == backend.colorize(Role.MUTED, "x")
        assert backend.colorize("bogus", "x") == f"{ANSI_CODES['default']}x{ANSI_RESET}"

    def test_disabled(self):
        assert AnsiBackend(False).colorize(Role.KEY, "k") == "k"

    def test_follows_global_flag(self):
        backend = AnsiBackend()
        set_color_enabled(False)
        assert backend.colorize(Role.KEY, "k") == "k"
        set_color_enabled(True)
        assert backend.colorize(Role.KEY, "k") != "k"

    def test_visible(self):
        backend = AnsiBackend(True)
        assert backend.visible(backend.colorize(Role.STRING, "abc") + "d") == "abcd"


class TestHtmlBackend:
    def test_colorize(self):
        assert HtmlBackend().colorize(Role.MUTED, "x") == '<span style="color:#999">x</span>'

    def test_escapes_text(self):
        out = HtmlBackend().colorize(Role.STRING, "<a & b>")
        assert out == '<span style="color:#80ff80">&lt;a &amp; b&gt;</span>'

    def test_unknown_role_keeps_text(self):
        assert HtmlBackend().colorize("bogus", "t") == '<span style="color:#ff7f00">t</span>'

    def test_visible(self):
        backend = HtmlBackend()
        painted = backend.colorize(Role.KEY, "a<b") + backend.escape(" & c")
        assert backend.visible(painted) == "a<b & c"

    def test_independent_of_terminal_flag(self):
        set_color_enabled(False)
        assert HtmlBackend().colorize(Role.KEY, "k").startswith("<span")


class TestPlainBackend:
    def test_identity(self):
        backend = ColorBackend()
        assert backend.colorize(Role.KEY, "<k>") == "<k>"
        assert backend.escape("<k>") == "<k>"
        assert repr(backend) == "ColorBackend()"


def test_every_role_has_colors():
    for role in Role:
        assert role.value in colors.ANSI_CODES
        assert role.value in colors.HTML_COLORS
