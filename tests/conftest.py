#
# Pytest Fixtures
#

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
import vardump.colors as colors
import vardump.dump as dump_module


# Fixtures -------------------------------------------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_state(monkeypatch):
    """Reset the process-wide color flag and the module-level dumper around every test."""
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("FORCE_COLOR", raising=False)
    monkeypatch.setattr(colors, "_color_enabled", None)
    monkeypatch.setattr(dump_module, "_default_dumper", dump_module.Dumper())
    yield


@pytest.fixture
def plain_dumper():
    """Dumper without header and color, for exact output assertions."""
    return dump_module.Dumper(header=False, color=False)
