import pytest
import structlog

from medledger.infrastructure.cli import main


@pytest.fixture(autouse=True)
def captured_logs(monkeypatch):
    """Collect structlog events instead of printing them."""
    monkeypatch.setattr(main, "configure_logging", lambda **kwargs: None)
    with structlog.testing.capture_logs() as logs:
        yield logs
