import pytest
import os
from datetime import date
from decimal import Decimal
from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine
from fastapi.testclient import TestClient

# Import all models to ensure they're registered with SQLModel
from src.api.commissions.models import CommissionRequest, Salesperson
from src.api.contracts.models import Contract, ContractItem, Installment
from src.api.ledger.models import LedgerEntry
from src.api.notifications.models import Notification
from src.api.common.config import EngineSettings
from src.api.common.constants.contracts import ContractKind, PaymentMethod, RecurrencePeriod
from src.api.common.utils.database import get_db
from src.api.contracts.schemas.contract import (
    ContractCreate, ContractItemCreate, PercentDiscount, SplitConfig, TaxRates)


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Setup test environment variables"""
    os.environ["ENV"] = "test"
    yield
    # Cleanup
    if "ENV" in os.environ:
        del os.environ["ENV"]


@pytest.fixture
def test_engine():
    """Create an in-memory SQLite database for testing"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite defers BEGIN on its own; emit it explicitly so savepoints work
    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def test_session(test_engine):
    """Create a test database session"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture
def test_settings():
    """Engine settings with fixed defaults and one approver"""
    return EngineSettings(
        env="test",
        go_live_offset_days=15,
        max_open_ended_occurrences=12,
        commission_approver_ids=[900],
    )


@pytest.fixture
def client(test_session):
    """API client whose requests share the test session"""
    from src.main import app

    def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_contract_data():
    """One-shot sale of 10 x 100 with 10% discount and 6.15% stacked taxes"""
    return ContractCreate(
        kind=ContractKind.SALE,
        client_id=1,
        start_date=date(2024, 1, 20),
        billing_day=5,
        account_category_id=10,
        cost_center_id=20,
        payment_method=PaymentMethod.PIX,
        bank_account_id=30,
        items=[ContractItemCreate(description="Consulting", quantity=Decimal("10"),
                                  unit_value=Decimal("100"))],
        discount=PercentDiscount(percent=Decimal("10")),
        taxes=TaxRates(irrf=Decimal("1.5"), pis=Decimal("0.65"),
                       cofins=Decimal("3"), csll=Decimal("1")),
        split=SplitConfig(installment_count=3),
    )


@pytest.fixture
def sample_recurring_contract_data():
    """Monthly purchase of 1 x 300, open ended"""
    return ContractCreate(
        kind=ContractKind.PURCHASE,
        supplier_id=2,
        start_date=date(2024, 1, 20),
        recurring=True,
        recurrence_period=RecurrencePeriod.MONTHLY,
        billing_day=5,
        account_category_id=11,
        cost_center_id=21,
        payment_method=PaymentMethod.BOLETO,
        bank_account_id=30,
        items=[ContractItemCreate(description="Hosting", quantity=Decimal("1"),
                                  unit_value=Decimal("300"))],
    )


# Test data factories
class TestDataFactory:
    @staticmethod
    def create_salesperson(session: Session, **kwargs) -> Salesperson:
        """Create a test salesperson"""
        data = {
            "name": "Ana Souza",
            "commission_percent": Decimal("5"),
            "supplier_id": 501,
            "cost_center_id": 20,
            "user_id": 77,
        }
        data.update(kwargs)

        salesperson = Salesperson(**data)
        session.add(salesperson)
        session.commit()
        session.refresh(salesperson)
        return salesperson

    @staticmethod
    def contract_data(**kwargs) -> ContractCreate:
        """Build contract input for a single-installment sale of 1000"""
        data = {
            "kind": ContractKind.SALE,
            "client_id": 1,
            "start_date": date(2024, 1, 20),
            "billing_day": 5,
            "account_category_id": 10,
            "cost_center_id": 20,
            "payment_method": PaymentMethod.TRANSFER,
            "bank_account_id": 30,
            "items": [ContractItemCreate(description="Implementation", quantity=Decimal("1"),
                                         unit_value=Decimal("1000"))],
        }
        data.update(kwargs)
        return ContractCreate(**data)


@pytest.fixture
def test_data_factory():
    """Provide test data factory"""
    return TestDataFactory
