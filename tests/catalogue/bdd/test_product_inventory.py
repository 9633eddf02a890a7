"""BDD tests for product inventory movements."""

from pytest_bdd import parsers, scenarios, then, when

from storefront.shared.errors import InsufficientStock

scenarios("features/product_inventory.feature")


@when(parsers.cfparse("{quantity:d} units are sold"))
def sell(product, error, quantity):
    try:
        product.remove_stock(quantity, reason="sale")
    except InsufficientStock as exc:
        error["exc"] = exc


@then(parsers.cfparse("the product has {quantity:d} units in stock"))
def units_in_stock(product, quantity):
    assert product.inventory.quantity == quantity


@then("the sale is refused for insufficient stock")
def sale_refused(error):
    assert isinstance(error["exc"], InsufficientStock)
