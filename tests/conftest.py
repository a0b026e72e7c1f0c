"""Configuración de pytest y fixtures compartidos."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Optional

import pytest

from acematch.config import get_settings
from acematch.exceptions import CandidateFetchError, DispatchError
from acematch.matching import MatchingEngine
from acematch.models import (
    BedroomRange,
    BudgetRange,
    InvestorPreferenceProfile,
    ListingStatus,
    NotificationPayload,
    NotificationRecord,
    PropertyListing,
)
from acematch.notifications import InMemoryNotificationLedger, NotificationDispatcher

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Variables de entorno mínimas y settings sin cache entre tests."""
    monkeypatch.setenv("SUPABASE_URL", "https://test.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "test-anon-key")
    monkeypatch.setenv("FETCH_RETRY_ATTEMPTS", "1")
    monkeypatch.setenv("NOTIFICATION_WEBHOOK_URL", "http://localhost/notify")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    return get_settings()


class FakeClock:
    """Reloj controlable para probar ventanas de tiempo."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeInvestorRepo:
    """Repositorio en memoria con la interfaz de InvestorPreferenceRepository."""

    def __init__(self, profiles=None):
        self.profiles = list(profiles or [])
        self.fail = False

    def get_active(self):
        if self.fail:
            raise CandidateFetchError("investor_preferences no disponible")
        return [p for p in self.profiles if p.active]

    def get_by_investor_id(self, investor_id):
        return next((p for p in self.profiles if p.investor_id == investor_id), None)


class FakePropertyRepo:
    """Repositorio en memoria con la interfaz de PropertyRepository."""

    def __init__(self, listings=None):
        self.listings = list(listings or [])
        self.fail = False

    def get_available(self):
        if self.fail:
            raise CandidateFetchError("properties no disponible")
        return [p for p in self.listings if p.is_available]

    def get_by_id(self, property_id):
        return next((p for p in self.listings if p.property_id == property_id), None)

    def get_recently_available(self, since):
        return [
            p for p in self.get_available()
            if p.updated_at is None or p.updated_at >= since
        ]


class RecordingDispatcher(NotificationDispatcher):
    """Dispatcher que guarda los payloads y responde según `fail_for`."""

    def __init__(self, fail_for: Optional[set] = None, raise_for: Optional[set] = None):
        self.sent: list[NotificationPayload] = []
        self.fail_for = fail_for or set()
        self.raise_for = raise_for or set()

    async def send(self, payload: NotificationPayload) -> bool:
        key = (payload.investor_id, payload.property_id)
        if key in self.raise_for:
            raise DispatchError("SMTP caído")
        if key in self.fail_for:
            return False
        self.sent.append(payload)
        return True

    @property
    def pairs(self) -> list[tuple[str, str]]:
        return [(p.investor_id, p.property_id) for p in self.sent]


@pytest.fixture
def make_investor():
    """Factory de perfiles. Por defecto: el inversor del escenario de referencia."""

    def _make(investor_id: str = "inv-1", **overrides) -> InvestorPreferenceProfile:
        data = dict(
            investor_id=investor_id,
            budget=BudgetRange(min=1000, max=1500, type="monthly"),
            bedrooms=BedroomRange(min=2, max=3),
            property_types=["Apartment"],
            property_licences=[],
            locations=[],
            full_name="Jane Investor",
            email=f"{investor_id}@example.com",
        )
        data.update(overrides)
        return InvestorPreferenceProfile(**data)

    return _make


@pytest.fixture
def make_listing():
    """Factory de propiedades. Por defecto: disponible y dentro del rango de referencia."""

    def _make(property_id: str = "prop-1", **overrides) -> PropertyListing:
        data = dict(
            property_id=property_id,
            price=1200,
            bedrooms=2,
            property_type="Apartment",
            location="East London",
            status=ListingStatus.AVAILABLE,
            address="12 Nash Road",
            city="London",
            postcode="E1 1AA",
            bathrooms=1,
            photos=["https://cdn.example.com/p1.jpg"],
        )
        data.update(overrides)
        return PropertyListing(**data)

    return _make


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger():
    return InMemoryNotificationLedger()


@pytest.fixture
def investor_repo():
    return FakeInvestorRepo()


@pytest.fixture
def property_repo():
    return FakePropertyRepo()


@pytest.fixture
def engine(investor_repo, property_repo, ledger, clock, settings):
    return MatchingEngine(
        investor_repo=investor_repo,
        property_repo=property_repo,
        ledger=ledger,
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def make_dispatcher():
    return RecordingDispatcher


@pytest.fixture
def make_record(clock):
    """Factory de registros de envío, por defecto enviados en el instante del reloj."""

    def _make(score: int, investor_id: str = "inv-1", property_id: str = "prop-1", sent_at=None):
        return NotificationRecord(
            investor_id=investor_id,
            property_id=property_id,
            sent_at=sent_at or clock.now,
            score_at_send=score,
        )

    return _make


class FakeQuery:
    """
    Query builder de Supabase falso.

    Registra la cadena de llamadas y devuelve `data` al ejecutar
    (o lanza `error` si se configuró).
    """

    def __init__(self, table: "FakeTable"):
        self.table = table
        self.calls: list[tuple] = []

    def __getattr__(self, name):
        def _method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return _method

    def execute(self):
        self.table.executed.append(self)
        op = self.calls[0][0] if self.calls else "select"
        outcome = self.table.responses.get(op, [])
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(data=outcome)


class FakeTable:
    def __init__(self):
        self.responses: dict = {}
        self.executed: list[FakeQuery] = []

    def query(self) -> FakeQuery:
        return FakeQuery(self)


class FakeSupabase:
    """Reemplazo de SupabaseClient para tests de repositorios."""

    def __init__(self):
        self.tables: dict[str, FakeTable] = {}

    def table(self, name: str) -> FakeQuery:
        return self.tables.setdefault(name, FakeTable()).query()

    def respond(self, table: str, op: str, data) -> None:
        self.tables.setdefault(table, FakeTable()).responses[op] = data

    def executed(self, table: str) -> list[FakeQuery]:
        return self.tables.setdefault(table, FakeTable()).executed


@pytest.fixture
def fake_supabase():
    return FakeSupabase()
