import os

# Banco em memória para os testes (precisa vir antes de importar a aplicação)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "chave-de-teste"

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from lavajato.auth_utils import create_default_credentials_if_not_exist
from lavajato.database import Base, SessionLocal, engine
from lavajato.services.catalog import CatalogStore
from lavajato.services.registry import CustomerRegistry
from main import app

ADMIN_PASSWORD = "comamor"
EMPLOYEE_PASSWORD = "lavajato"


class FixedClock:
    """Relógio controlado pelos testes."""

    def __init__(self, now=None):
        self.now = now or datetime(2026, 5, 10, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    create_default_credentials_if_not_exist()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def catalog(db):
    """
    Catálogo básico:
    - Lavagem Simples (R$ 50): 1.5 de shampoo
    - Cera (R$ 30): 1 de cera + 0.5 de shampoo
    - Polimento de Fidelidade (R$ 0): sem insumos
    """
    store = CatalogStore(db)
    shampoo = store.create_product({
        "name": "Shampoo automotivo", "supplier": "Química Sul",
        "cost": Decimal("25.00"), "stock": Decimal("10"), "min_stock": Decimal("2"),
    })
    wax = store.create_product({
        "name": "Cera de carnaúba", "supplier": "Brilho Forte",
        "cost": Decimal("40.00"), "stock": Decimal("5"), "min_stock": Decimal("1"),
    })
    wash = store.create_service("Lavagem Simples", Decimal("50.00"), [(shampoo.id, Decimal("1.5"))])
    waxing = store.create_service(
        "Cera", Decimal("30.00"), [(wax.id, Decimal("1")), (shampoo.id, Decimal("0.5"))]
    )
    reward = store.create_service("Polimento de Fidelidade", Decimal("0"), [])
    return {
        "shampoo": shampoo.id,
        "wax": wax.id,
        "wash": wash.id,
        "waxing": waxing.id,
        "reward": reward.id,
    }


@pytest.fixture
def customer(db):
    registry = CustomerRegistry(db)
    created = registry.register_customer(
        {"name": "Maria Souza", "phone": "(11) 98888-7777", "email": "maria@example.com"},
        [{"plate": "abc1d23", "model": "Onix", "color": "Prata"}],
    )
    return {"id": created.id, "vehicle_id": created.vehicles[0].id}


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def _login(test_client, username, password):
    response = test_client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return test_client


@pytest.fixture
def admin_client(client):
    return _login(client, "admin", ADMIN_PASSWORD)


@pytest.fixture
def employee_client(client):
    return _login(client, "funcionario", EMPLOYEE_PASSWORD)
