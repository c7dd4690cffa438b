#
# Pytest Fixtures
#

# Standard library -----------------------------------------------------------------------------------------------------
import logging

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from recrepr.formatters import ReprStyle
from recrepr.render import TRACE


# Fixtures -------------------------------------------------------------------------------------------------------------

@pytest.fixture
def short() -> ReprStyle:
    """Style without identity tokens, gives deterministic output."""
    return ReprStyle.short()


@pytest.fixture
def render_logs(caplog):
    """Capture recrepr.render records at DEBUG level."""
    caplog.set_level(logging.DEBUG, logger="recrepr.render")
    return caplog


@pytest.fixture
def trace_logs(caplog):
    """Capture recrepr.render records down to the TRACE level."""
    caplog.set_level(TRACE, logger="recrepr.render")
    return caplog
