import os

os.environ["ENV"] = "local"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["STORAGE_ENDPOINT_URL"] = ""

from decimal import Decimal

import boto3
import pytest
from fastapi.testclient import TestClient

from deliveryapp.cart import MemoryStorage
from deliveryapp.database import build_engine, create_db_and_tables
from deliveryapp.dependencies.cart import get_cart_storage
from deliveryapp.dependencies.context import build_context
from deliveryapp.main import create_app
from deliveryapp.manage import grant_role
from deliveryapp.store import BlobStore
from deliveryapp.services.settings_service import save_setting


class RecordingSound:
    def __init__(self):
        self.calls = []

    def play_once(self):
        self.calls.append("once")

    def start_loop(self):
        self.calls.append("loop")

    def stop(self):
        self.calls.append("stop")


class RecordingToaster:
    def __init__(self):
        self.toasts = []

    def toast(self, title, description, variant="default"):
        self.toasts.append((title, description, variant))


@pytest.fixture
def sound():
    return RecordingSound()


@pytest.fixture
def toaster():
    return RecordingToaster()


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        endpoint_url="https://storage.test",
        aws_access_key_id="test",
        aws_secret_access_key="test",
        region_name="auto",
    )


@pytest.fixture
def blobs(s3_client):
    return BlobStore(s3_client, "product-images", "https://cdn.loja.test")


@pytest.fixture
def context(engine, blobs):
    return build_context(engine, blobs=blobs)


@pytest.fixture
def store(context):
    return context.store


@pytest.fixture
def feed(context):
    return context.feed


@pytest.fixture
def cart_storage():
    return MemoryStorage()


@pytest.fixture
def app(context, cart_storage):
    app = create_app(context)
    app.dependency_overrides[get_cart_storage] = lambda: cart_storage
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin_token(context):
    session = context.auth.sign_up("dono@loja.com.br", "segredo123", "Dona da Loja")
    grant_role(context.store, session.email, "admin")
    return session.access_token


@pytest.fixture
def customer_token(context):
    session = context.auth.sign_up("cliente@loja.com.br", "senha123", "Ana Cliente", "(11) 98888-7777")
    return session.access_token


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def customer_headers(customer_token):
    return {"Authorization": f"Bearer {customer_token}"}


@pytest.fixture
def merchant_whatsapp(store):
    save_setting(store, "whatsapp_number", "+55 (11) 91234-5678")
    return "5511912345678"


@pytest.fixture
def burger(store):
    product = store.insert("products", {
        "name": "X-Burger",
        "description": "Pão, carne e queijo",
        "price": Decimal("10.00"),
        "category": "Lanches",
        "image_url": "https://cdn.loja.test/x-burger.jpg",
    })[0]
    bacon, cheese = store.insert("add_ons", [
        {"name": "Bacon", "price": Decimal("3.00")},
        {"name": "Queijo extra", "price": Decimal("2.00")},
    ])
    store.insert("product_add_ons", [
        {"product_id": product.id, "add_on_id": bacon.id},
        {"product_id": product.id, "add_on_id": cheese.id},
    ])
    return {"product": product, "bacon": bacon, "cheese": cheese}
