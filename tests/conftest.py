"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime, timedelta, timezone
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from autosave_ledger.api.main import create_app
from autosave_ledger.config import settings
from autosave_ledger.domain.models import Account, Goal, Transaction, COMPLETED, EXPENSE, INCOME
from autosave_ledger.infrastructure.database.models import Base
from autosave_ledger.infrastructure.database.repositories import SqlLedgerStore
from autosave_ledger.infrastructure.database.session import get_db
from autosave_ledger.infrastructure.memory.store import InMemoryLedgerStore
from autosave_ledger.services.ledger import Ledger
from autosave_ledger.services.locking import LockRegistry
from autosave_ledger.services.withdrawals import PlanRegistry

TODAY = date(2024, 3, 15)

# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeClock:
    """Settable wall clock for plan expiry"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def sample_accounts() -> list[Account]:
    """Bank snapshot: a salary account and a card account at the same bank, one elsewhere"""
    salary = Account(
        id=1,
        bank_id="sber",
        number="40817810000000000001",
        balance_cents=150000,
        transactions=[
            Transaction(
                id=0,
                date=date(2024, 3, 10),
                description="Groceries",
                amount_cents=-40000,
                type=EXPENSE,
                category="Food",
            ),
            Transaction(
                id=0,
                date=date(2024, 3, 1),
                description="Salary",
                amount_cents=300000,
                type=INCOME,
                category="Salary",
                sender="Employer LLC",
            ),
        ],
    )
    card = Account(id=2, bank_id="sber", number="40817810000000000002", balance_cents=5000)
    other = Account(id=3, bank_id="tinkoff", number="40817810000000000003", balance_cents=70000)
    return [salary, card, other]


def seed(store) -> Goal:
    """Accounts plus the "Машина" goal holding 50000 across two completed deposits"""
    with store.unit_of_work():
        for account in sample_accounts():
            store.accounts.add(account)
        goal = store.goals.create(
            Goal(
                id=0,
                name="Машина",
                target_cents=500000,
                current_cents=0,
                monthly_cents=25000,
                next_deposit=date(2024, 4, 1),
                bank_id="sber",
                order=1,
            )
        )
        goal.current_cents = 50000
        store.goals.save(goal)
        store.goals.add_deposit(goal.id, 25000, date(2024, 1, 1), COMPLETED)
        store.goals.add_deposit(goal.id, 25000, date(2024, 2, 1), COMPLETED)
    return store.goals.get(goal.id)


@pytest.fixture
def store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def car_goal(store: InMemoryLedgerStore) -> Goal:
    return seed(store)


@pytest.fixture
def plan_clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def ledger(store: InMemoryLedgerStore, car_goal: Goal, plan_clock: FakeClock) -> Ledger:
    """Ledger over the seeded in-memory store, withdrawing from the car goal into account 1"""
    return Ledger(
        store,
        plans=PlanRegistry(ttl_seconds=900, now=plan_clock),
        locks=LockRegistry(timeout=1.0),
        home_account_id=1,
        withdrawal_goal_id=car_goal.id,
        clock=lambda: TODAY,
    )


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    monkeypatch.setattr(settings, "home_account_id", 1)
    monkeypatch.setattr(settings, "withdrawal_goal_id", 1)

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def sql_store(db: Session) -> SqlLedgerStore:
    """SQL store on the test database, seeded like the in-memory one"""
    store = SqlLedgerStore(db)
    seed(store)
    return store


@pytest.fixture
def seeded_client(client: TestClient, sql_store: SqlLedgerStore) -> TestClient:
    """Test client whose database holds the sample accounts and the car goal (id 1)"""
    return client
