"""
Shared test fixtures for the Listora test suite.
"""

import os

# Must be set before listora.config is imported anywhere
os.environ.setdefault("ENCRYPTION_KEY", "bGlzdG9yYS10ZXN0LWVuY3J5cHRpb24ta2V5LTAwMDE=")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import uuid  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from listora.config import Settings, get_settings  # noqa: E402
from listora.core.encryption import _get_fernet  # noqa: E402
from listora.core.models import ProductContent, PublishingOptions  # noqa: E402
from listora.core.resilience import RetryPolicy  # noqa: E402
from listora.db.models import Base  # noqa: E402

TEST_ENCRYPTION_KEY = os.environ["ENCRYPTION_KEY"]

GENERATED_HEADPHONES_CONTENT = """**1. PRODUCT TITLE/HEADLINE:**
Wireless Noise Cancelling Over-Ear Headphones with 40 Hour Battery, Perfect for Travel

**2. KEY SELLING POINTS:**
- **Immersive Sound**: Deep bass and crystal clear highs for every playlist
- **All-Day Battery**: Up to 40 hours of playback on a single charge
- **Comfort Fit**: Memory foam ear cushions designed for long listening sessions

**3. DETAILED PRODUCT DESCRIPTION:**
Enjoy every note with active noise cancelling that blocks out the commute. The headphones are crafted from lightweight aluminum and soft protein leather. Bluetooth 5.3 keeps the connection stable up to 30 feet away. A quick 10 minute charge delivers 5 hours of playback. Folding hinges make them easy to carry in the included travel case.

**4. INSTAGRAM CAPTION:**
Silence the noise and turn up the music #headphones #travel

**5. BLOG INTRO:**
Long flights are easier with the right pair of headphones.

**6. CALL-TO-ACTION:**
Shop now and hear the difference!
"""


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Settings and the Fernet instance are cached per process."""
    get_settings.cache_clear()
    _get_fernet.cache_clear()
    yield
    get_settings.cache_clear()
    _get_fernet.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Sandbox settings isolated from any .env file."""
    return Settings(
        _env_file=None,
        encryption_key=TEST_ENCRYPTION_KEY,
        database_url="sqlite+aiosqlite:///:memory:",
        ebay_app_id="test-app-id",
        ebay_dev_id="test-dev-id",
        ebay_cert_id="test-cert-id",
        ebay_redirect_uri="Listora-Test-RuName",
        ebay_sandbox=True,
    )


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.UUID("8f14e45f-ceea-467e-9a1c-6d8b2c4d1e01")


@pytest.fixture
def headphones_content() -> ProductContent:
    """Bare product record with no generated copy and no brand keyword."""
    return ProductContent(product_name="Wireless Bluetooth Headphones")


@pytest.fixture
def generated_content() -> ProductContent:
    """Product record with a full set of generated marketing sections."""
    return ProductContent(
        product_name="Noise Cancelling Headphones",
        generated_content=GENERATED_HEADPHONES_CONTENT,
    )


@pytest.fixture
def publishing_options() -> PublishingOptions:
    return PublishingOptions(price=Decimal("29.99"), quantity=5)


class RecordingSleep:
    """Stands in for asyncio.sleep and records the requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def retry_policy(fake_sleep) -> RetryPolicy:
    """Production backoff schedule without real waiting."""
    return RetryPolicy(max_attempts=3, base_delay=2.0, multiplier=2.0, sleep=fake_sleep)


# ─── Database ────────────────────────────────────────────────


def _enable_foreign_keys(engine) -> None:
    # SQLite needs PRAGMA foreign_keys for FK enforcement
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@pytest.fixture
async def engine():
    """Create an in-memory async SQLite engine for testing."""
    eng = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    _enable_foreign_keys(eng)

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest.fixture
async def session(engine):
    """Create a fresh async session for each test."""
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as sess:
        yield sess


@pytest.fixture
async def session_factory(tmp_path):
    """
    Session factory over a file-backed SQLite database.

    Services open several sessions at once, which needs real separate
    connections rather than one shared in-memory database.
    """
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'listora.db'}", echo=False)
    _enable_foreign_keys(eng)

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=eng, class_=AsyncSession, expire_on_commit=False)

    await eng.dispose()
