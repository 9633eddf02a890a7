"""Shared BDD fixtures and step definitions for Ordering."""

import json

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then

from storefront.catalogue.product.management import UpdateProduct
from storefront.catalogue.product.product import Product

CUSTOMER = "user-bdd-001"


@pytest.fixture()
def customer():
    return CUSTOMER


@pytest.fixture()
def products():
    """Product ids by name."""
    return {}


@pytest.fixture()
def outcome():
    """The placed order id or the error checkout raised."""
    return {"order_id": None, "exc": None}


@given(parsers.cfparse('a product "{name}" priced {price:f} with {quantity:d} units in stock'))
def product_priced(make_product, products, name, price, quantity):
    products[name] = make_product(name, price=price, quantity=quantity)


@given(parsers.cfparse('the customer has {quantity:d} "{name}" in the cart'))
def customer_cart(add_to_cart, products, customer, quantity, name):
    add_to_cart(customer, products[name], quantity)


@given(parsers.cfparse('"{name}" stock drops to {quantity:d}'))
def stock_drops(products, name, quantity):
    command = UpdateProduct(product_id=products[name], inventory=json.dumps({"quantity": quantity}))
    current_domain.process(command, asynchronous=False)


@then(parsers.cfparse('"{name}" has {quantity:d} units in stock'))
def units_in_stock(products, name, quantity):
    assert current_domain.repository_for(Product).get(products[name]).inventory.quantity == quantity
