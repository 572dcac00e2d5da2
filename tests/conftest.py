from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

# pytest may run without installing the project; ensure repo root is importable.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from solstamp.core.retry import FixedDelay, RetryPolicy  # noqa: E402
from solstamp.discovery.base import DiscoveryContext  # noqa: E402
from tests.unit._fake_ledger import FakeLedger, FakeSleep  # noqa: E402


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolated config dir; env points at it so nothing touches the real home."""

    d = tmp_path / "solstamp-config"
    monkeypatch.setenv("SOLANA_TIMESTAMP_CONFIG_DIR", str(d))
    return d


@pytest.fixture()
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture()
def make_ctx(fake_sleep: FakeSleep):
    def _make(ledger: FakeLedger, *, attempts: int = 3, delay_ms: int = 1000) -> DiscoveryContext:
        return DiscoveryContext(
            transport=ledger,
            retry=RetryPolicy(max_attempts=attempts, delay=FixedDelay(delay_ms)),
            sleep=fake_sleep,
            logger=logging.getLogger("test"),
        )

    return _make


@pytest.fixture(autouse=True)
def _reset_solstamp_logger():
    """setup_logging() binds a handler to the stream of the moment; drop it after each test."""

    yield
    logger = logging.getLogger("solstamp")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
