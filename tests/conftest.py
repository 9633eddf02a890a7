import json
import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Initialize the storefront domain and keep its context active for the whole run.

    Test modules and fixtures reach it through `current_domain`.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from storefront.domain import storefront

    storefront.init()
    storefront.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session", autouse=True)
def setup_db(request):
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    setup_db(storefront)

    yield

    drop_db(storefront)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from protean import current_domain

    from storefront.ordering.cart.coupons import reset_coupon_resolver
    from storefront.payments.gateway import reset_gateway

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()

    reset_gateway()
    reset_coupon_resolver()


# ---------------------------------------------------------------------------
# Payment gateway
# ---------------------------------------------------------------------------
@pytest.fixture()
def gateway():
    """A fresh fake gateway installed as the active one."""
    from storefront.config import get_settings
    from storefront.payments.gateway import set_gateway
    from storefront.payments.gateway.fake_adapter import FakeGateway

    fake = FakeGateway(webhook_secret=get_settings().stripe_webhook_secret)
    set_gateway(fake)
    return fake


# ---------------------------------------------------------------------------
# Catalogue and checkout builders
# ---------------------------------------------------------------------------
SHIPPING_ADDRESS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "phone": "555-0100",
    "street": "12 Analytical Way",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62701",
    "country": "United States",
}


@pytest.fixture()
def shipping_address():
    return dict(SHIPPING_ADDRESS)


@pytest.fixture()
def make_category():
    from protean import current_domain

    from storefront.catalogue.category.management import CreateCategory

    def _make(name="Electronics", parent_id=None, **fields):
        command = CreateCategory(name=name, parent_id=parent_id, **fields)
        return current_domain.process(command, asynchronous=False)

    return _make


@pytest.fixture()
def make_product(make_category):
    """Create a product through the management command; returns its id.

    A category is created on first use unless one is given.
    """
    from protean import current_domain

    from storefront.catalogue.product.management import CreateProduct

    state = {"category_id": None, "counter": 0}

    def _make(name="Wireless Mouse", price=25.0, quantity=50, category_id=None, sku=None, **fields):
        if category_id is None:
            if state["category_id"] is None:
                state["category_id"] = make_category("Accessories")
            category_id = state["category_id"]

        state["counter"] += 1
        inventory = fields.pop("inventory", {"quantity": quantity})
        for key in ("variants", "images", "tags", "specifications"):
            if key in fields and not isinstance(fields[key], str):
                fields[key] = json.dumps(fields[key])

        command = CreateProduct(
            name=name,
            description=fields.pop("description", f"{name} for everyday use"),
            price=price,
            category_id=category_id,
            sku=sku or f"TEST-SKU-{state['counter']:03d}",
            inventory=json.dumps(inventory),
            **fields,
        )
        return current_domain.process(command, asynchronous=False)

    return _make


@pytest.fixture()
def add_to_cart():
    from protean import current_domain

    from storefront.ordering.cart.items import AddToCart

    def _add(user_id, product_id, quantity=1, selected_variants=None):
        command = AddToCart(
            user_id=user_id,
            product_id=product_id,
            quantity=quantity,
            selected_variants=json.dumps(selected_variants or []),
        )
        return current_domain.process(command, asynchronous=False)

    return _add


@pytest.fixture()
def place_order(shipping_address):
    from storefront.catalogue.product.inventory import process_stock_command
    from storefront.ordering.order.creation import PlaceOrder

    def _place(user_id, payment_method="stripe", **fields):
        command = PlaceOrder(
            user_id=user_id,
            shipping_address=json.dumps(fields.pop("shipping_address", shipping_address)),
            payment_method=payment_method,
            **fields,
        )
        return process_stock_command(command)

    return _place


@pytest.fixture()
def checkout(make_product, add_to_cart, place_order):
    """Place an order for one product line; returns (order_id, product_id)."""

    def _checkout(user_id="user-001", price=40.0, quantity=2, stock=10):
        product_id = make_product(price=price, quantity=stock)
        add_to_cart(user_id, product_id, quantity)
        return place_order(user_id), product_id

    return _checkout


@pytest.fixture()
def pay_order():
    """Mark an order paid directly on the aggregate."""
    from protean import current_domain

    from storefront.ordering.order.order import Order

    def _pay(order_id, transaction_id="pi_test_paid"):
        repo = current_domain.repository_for(Order)
        order = repo.get(order_id)
        order.attach_payment_intent(transaction_id)
        order.mark_as_paid(transaction_id)
        repo.add(order)
        return order

    return _pay


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
@pytest.fixture()
def register_user():
    """Create a user profile; returns its user id."""
    from protean import current_domain

    from storefront.identity.user.registration import RegisterUser

    def _register(user_id="user-001", email=None, first_name="Ada", last_name="Lovelace", role="user"):
        command = RegisterUser(
            user_id=user_id,
            email=email or f"{user_id}@example.com",
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        return current_domain.process(command, asynchronous=False)

    return _register


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_token():
    from jose import jwt

    from storefront.config import get_settings

    def _token(user_id="user-001", role="user", name=None, secret=None):
        settings = get_settings()
        claims = {"sub": user_id, "role": role}
        if name:
            claims["name"] = name
        return jwt.encode(claims, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)

    return _token


@pytest.fixture()
def user_headers(make_token):
    return {"Authorization": f"Bearer {make_token('user-001', name='Ada')}"}


@pytest.fixture()
def other_user_headers(make_token):
    return {"Authorization": f"Bearer {make_token('user-002')}"}


@pytest.fixture()
def admin_headers(make_token):
    return {"Authorization": f"Bearer {make_token('admin-001', role='admin')}"}


@pytest.fixture()
def client():
    """All routers behind the storefront error handlers."""
    from fastapi import FastAPI
    from fastapi.testclient import TestClient

    from storefront.api.errors import register_error_handlers
    from storefront.catalogue.api import category_router, product_router
    from storefront.identity.api import user_router
    from storefront.ordering.api import cart_router, order_router
    from storefront.payments.api import payment_router

    app = FastAPI()
    register_error_handlers(app)
    app.include_router(product_router)
    app.include_router(category_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(payment_router)
    app.include_router(user_router)
    return TestClient(app, raise_server_exceptions=False)
