import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from sla_monitor.audit.store import InMemoryAuditStore
from sla_monitor.config.settings import WorkerConfig
from sla_monitor.engine.sla_engine import SLAEngine
from sla_monitor.infrastructure.queue.in_memory import InMemoryQueueBroker
from sla_monitor.infrastructure.worker.worker import SLAWorker
from sla_monitor.tools.notifications import EscalationDispatcher, NoOpDeliveryAdapter
from sla_monitor.tools.store import InMemorySubmissionStore

# --- .env loader -----------------------------------------------------------

def _load_env_file(filename: str = '.env'):
    """Lightweight .env loader for test runs."""
    root = Path(__file__).resolve().parent.parent
    env_path = root / filename
    if not env_path.exists():
        return
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k, v = line.split('=', 1)
        k = k.strip()
        v = v.strip().strip('"').strip("'")
        if k and k not in os.environ:
            os.environ[k] = v

_load_env_file()

# Live Redis/Supabase tests are opt-in.
LIVE_NETWORK_DISABLED = os.environ.get('DISABLE_LIVE_INTEGRATION', '1') in ('1', 'true', 'TRUE')


def pytest_configure(config):
    config.addinivalue_line("markers", "live_integration: talks to a real Redis/Supabase")


def pytest_runtest_setup(item):
    if LIVE_NETWORK_DISABLED and 'live_integration' in item.keywords:
        pytest.skip('Live integration tests disabled by DISABLE_LIVE_INTEGRATION env flag')


# --- time helpers ------------------------------------------------------------

# day 0 of every scenario; received mid-morning so rounding is exercised
DAY0 = datetime(2024, 3, 4, 9, 30, tzinfo=timezone.utc)


def day(n: int, hour: int = 0, minute: int = 0) -> datetime:
    """Instant on day n (relative to DAY0's calendar date), UTC."""
    base = DAY0.replace(hour=0, minute=0, second=0, microsecond=0)
    return base + timedelta(days=n, hours=hour, minutes=minute)


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# --- fixtures ----------------------------------------------------------------

@pytest.fixture
def clock():
    return Clock(day(3))


@pytest.fixture
def store():
    return InMemorySubmissionStore()


@pytest.fixture
def delivery():
    return NoOpDeliveryAdapter()


@pytest.fixture
def engine(store, delivery, clock):
    return SLAEngine(store, EscalationDispatcher(delivery), clock=clock)


@pytest.fixture
def queue():
    return InMemoryQueueBroker()


@pytest.fixture
def audit():
    return InMemoryAuditStore()


@pytest.fixture
def fast_config():
    return WorkerConfig(check_interval_minutes=60, pop_timeout=0.05, max_retries=3, retry_base_delay=0, queue_name="test:sla")


@pytest.fixture
def worker(queue, engine, fast_config, audit):
    w = SLAWorker(queue, engine, config=fast_config, audit=audit)
    yield w
    if w.is_running:
        w.stop(timeout=2)
