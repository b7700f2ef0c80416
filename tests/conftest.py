import os

# Pas de Redis pendant les tests (doit précéder l'import de l'app)
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Generator, List, Optional
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from boutique.app import app as fastapi_app
from boutique.errors import DuplicateOrder, PaymentProviderError
from boutique.orders.models import Order
from boutique.utils.security import require_user

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


TEST_USER: Dict[str, Any] = {"id": "user-1", "email": "test@example.com", "role": "user", "token": "fake-token"}


@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_user(app):
    app.dependency_overrides[require_user] = lambda: dict(TEST_USER)
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_user, None)

# Aucun test ne doit joindre un vrai Supabase
@pytest.fixture(autouse=True)
def _no_real_supabase(monkeypatch):
    monkeypatch.setattr("boutique.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("boutique.infra.supabase_client.get_service_supabase", lambda: MagicMock())


# --- Faux store coupons (contrainte: un coupon par user_id) ---
class FakeCouponStore:
    def __init__(self):
        self.rows: List[Dict[str, Any]] = []
        self.lock = threading.Lock()

    def add(self, code: str, user_id: str = "user-1", discount_percentage: int = 10,
            expires_in: timedelta = timedelta(days=30), is_active: bool = True) -> Dict[str, Any]:
        row = {
            "code": code,
            "discount_percentage": discount_percentage,
            "expiration_date": (datetime.now(timezone.utc) + expires_in).isoformat(),
            "user_id": user_id,
            "is_active": is_active,
        }
        self.rows.append(row)
        return row

    def get(self, code: str) -> Optional[Dict[str, Any]]:
        return next((r for r in self.rows if r["code"] == code), None)

    def for_user(self, user_id: str) -> List[Dict[str, Any]]:
        return [r for r in self.rows if r["user_id"] == user_id]

    def active_for(self, user_id: str) -> List[Dict[str, Any]]:
        return [r for r in self.for_user(user_id) if r["is_active"]]

    def find_active_coupon(self, code, user_id):
        with self.lock:
            return next((dict(r) for r in self.rows if r["code"] == code and r["user_id"] == user_id and r["is_active"]), None)

    def find_active_coupon_for_user(self, user_id):
        with self.lock:
            return next((dict(r) for r in self.rows if r["user_id"] == user_id and r["is_active"]), None)

    def replace_user_coupon(self, row):
        with self.lock:
            self.rows = [r for r in self.rows if r["user_id"] != row["user_id"]]
            self.rows.append(dict(row))
            return dict(row)

    def deactivate_coupon(self, code, user_id):
        with self.lock:
            changed = 0
            for r in self.rows:
                if r["code"] == code and r["user_id"] == user_id and r["is_active"]:
                    r["is_active"] = False
                    changed += 1
            return changed


# --- Faux registre des commandes (contrainte unique sur la session) ---
class FakeOrderStore:
    def __init__(self):
        self.orders: Dict[str, Order] = {}
        self.lock = threading.Lock()
        self.insert_attempts = 0

    def find_by_session_id(self, session_id):
        with self.lock:
            return self.orders.get(session_id)

    def insert_order(self, order: Order):
        with self.lock:
            self.insert_attempts += 1
            if order.external_session_id in self.orders:
                raise DuplicateOrder(order.external_session_id)
            self.orders[order.external_session_id] = order
            return order

    def list_user_orders(self, user_id, limit=50):
        with self.lock:
            rows = [o for o in self.orders.values() if o.user_id == user_id]
        return sorted(rows, key=lambda o: o.created_at, reverse=True)[:limit]


# --- Faux Stripe (sessions Checkout + coupons one-shot) ---
class FakeStripe:
    def __init__(self):
        self.sessions: Dict[str, Dict[str, Any]] = {}
        self.discounts: Dict[str, int] = {}
        self.get_calls = 0
        self.fail = False
        self.barrier: Optional[threading.Barrier] = None

    def create_discount(self, amount_off, currency):
        if self.fail:
            raise PaymentProviderError("stripe down")
        discount_id = f"coupon_{len(self.discounts) + 1}"
        self.discounts[discount_id] = amount_off
        return discount_id

    def create_session(self, *, line_items, metadata, discounts=None, client_reference_id=None, **kwargs):
        if self.fail:
            raise PaymentProviderError("stripe down")
        amount = sum(li["price_data"]["unit_amount"] * li["quantity"] for li in line_items)
        for d in discounts or []:
            amount -= self.discounts[d["coupon"]]
        session_id = f"cs_test_{len(self.sessions) + 1}"
        self.sessions[session_id] = {
            "id": session_id,
            "url": f"https://checkout.stripe.test/{session_id}",
            "payment_status": "unpaid",
            "amount_total": amount,
            "metadata": dict(metadata),
            "client_reference_id": client_reference_id,
            "line_items": line_items,
            "discounts": discounts or [],
        }
        return dict(self.sessions[session_id])

    def get_session(self, session_id):
        self.get_calls += 1
        if self.barrier is not None:
            self.barrier.wait(timeout=5)
        if session_id not in self.sessions:
            raise PaymentProviderError(f"No such checkout.session: {session_id}")
        return dict(self.sessions[session_id])

    def pay(self, session_id, amount_total=None):
        self.sessions[session_id]["payment_status"] = "paid"
        if amount_total is not None:
            self.sessions[session_id]["amount_total"] = amount_total


@pytest.fixture
def coupon_store(monkeypatch) -> FakeCouponStore:
    store = FakeCouponStore()
    for name in ("find_active_coupon", "find_active_coupon_for_user", "replace_user_coupon", "deactivate_coupon"):
        monkeypatch.setattr(f"boutique.coupons.repository.{name}", getattr(store, name))
    return store

@pytest.fixture
def order_store(monkeypatch) -> FakeOrderStore:
    store = FakeOrderStore()
    for name in ("find_by_session_id", "insert_order", "list_user_orders"):
        monkeypatch.setattr(f"boutique.orders.repository.{name}", getattr(store, name))
    return store

@pytest.fixture
def fake_stripe(monkeypatch) -> FakeStripe:
    fake = FakeStripe()
    for name in ("create_discount", "create_session", "get_session"):
        monkeypatch.setattr(f"boutique.checkout.stripe_client.{name}", getattr(fake, name))
    return fake

@pytest.fixture
def catalog(monkeypatch) -> Dict[str, Dict[str, Any]]:
    """Catalogue modifiable par les tests: {id: {id, name, price, image}} (prix en unités majeures)."""
    products = {
        "p1": {"id": "p1", "name": "Casque", "price": "50.00", "image": "https://img.test/p1.png"},
        "p2": {"id": "p2", "name": "Clavier", "price": "125.00", "image": None},
        "p3": {"id": "p3", "name": "Câble", "price": "9.99", "image": None},
    }
    monkeypatch.setattr(
        "boutique.catalog.repository.fetch_products_by_ids",
        lambda ids: [dict(products[i]) for i in ids if i in products],
    )
    return products

@pytest.fixture
def shop(coupon_store, order_store, fake_stripe, catalog):
    """Tous les collaborateurs externes simulés."""
    return {"coupons": coupon_store, "orders": order_store, "stripe": fake_stripe, "catalog": catalog}
