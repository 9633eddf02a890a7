"""BDD tests for the category hierarchy."""

from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, then, when

from storefront.catalogue.category.category import Category
from storefront.catalogue.category.management import DeleteCategory, MoveCategory, UpdateCategory

scenarios("features/category_hierarchy.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('a category "{name}" is created under "{parent}"'), target_fixture="category")
def create_under(make_category, categories, name, parent):
    categories[name] = make_category(name, parent_id=categories[parent])
    return current_domain.repository_for(Category).get(categories[name])


@when(parsers.cfparse('the category "{name}" is renamed to "{new_name}"'))
def rename(categories, name, new_name):
    current_domain.process(UpdateCategory(category_id=categories[name], name=new_name), asynchronous=False)


@when(parsers.cfparse('the category "{name}" is moved under "{parent}"'))
def move(categories, error, name, parent):
    try:
        current_domain.process(MoveCategory(category_id=categories[name], parent_id=categories[parent]), asynchronous=False)
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the category "{name}" is deleted'))
def delete(categories, error, name):
    try:
        current_domain.process(DeleteCategory(category_id=categories[name]), asynchronous=False)
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the category slug is "{slug}"'))
def slug_is(category, slug):
    assert category.slug == slug


@then(parsers.cfparse('the category path is "{path}"'))
def path_is(category, path):
    assert category.path == path


@then(parsers.cfparse("the category level is {level:d}"))
def level_is(category, level):
    assert category.level == level
