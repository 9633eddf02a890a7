"""Shared BDD fixtures and step definitions for the Catalogue."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

from storefront.catalogue.category.category import Category
from storefront.catalogue.product.events import ProductCreated, ProductReviewed, StockLevelChanged
from storefront.catalogue.product.product import Product

_PRODUCT_EVENT_CLASSES = {
    "ProductCreated": ProductCreated,
    "ProductReviewed": ProductReviewed,
    "StockLevelChanged": StockLevelChanged,
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def categories():
    """Category ids by name."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a root category "{name}"'))
def root_category(make_category, categories, name):
    categories[name] = make_category(name)


@given(parsers.cfparse('a category "{name}" under "{parent}"'))
def child_category(make_category, categories, name, parent):
    categories[name] = make_category(name, parent_id=categories[parent])


@given(parsers.cfparse('a product in category "{name}"'))
def product_in_category(make_product, categories, name):
    make_product(category_id=categories[name])


@given(parsers.cfparse("a product with {quantity:d} units in stock"), target_fixture="product")
def product_in_stock(quantity):
    product = Product.create(
        name="Desk Lamp",
        description="Adjustable desk lamp",
        price=35.0,
        category_id="cat-001",
        sku="LAMP-001",
        inventory={"quantity": quantity},
    )
    product._events.clear()
    return product


@given("a product that does not track inventory", target_fixture="product")
def untracked_product():
    product = Product.create(
        name="E-book",
        description="Downloadable guide",
        price=9.0,
        category_id="cat-001",
        sku="EBOOK-001",
        inventory={"quantity": 0, "track_quantity": False},
        is_digital=True,
    )
    product._events.clear()
    return product


# ---------------------------------------------------------------------------
# Then steps (shared)
# ---------------------------------------------------------------------------
@then("the action fails with a validation error")
def action_fails_with_validation_error(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse('the category "{name}" has path "{path}"'))
def category_has_path(categories, name, path):
    assert current_domain.repository_for(Category).get(categories[name]).path == path


@then(parsers.cfparse("a {event_type} product event is raised"))
def product_event_raised(product, event_type):
    event_cls = _PRODUCT_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in product._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in product._events]}"
