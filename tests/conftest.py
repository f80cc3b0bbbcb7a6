import pytest

from recfun.recfun_config import Settings, configure_logging, get_settings


@pytest.fixture(autouse=True)
def quiet_logging():
    """Fresh settings and warning-level logging for every test."""
    get_settings.cache_clear()
    configure_logging(Settings(LOG_LEVEL="WARNING"))
    yield
    get_settings.cache_clear()
