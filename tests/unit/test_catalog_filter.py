"""Unit tests for catalog filtering and category listing."""

from decimal import Decimal

import pytest
from services.storefront_service.models import Product
from services.storefront_service.services.catalog import (
    ALL_CATEGORIES,
    categories,
    filter_products,
)


def _product(name, category, description=None):
    return Product(name=name, category=category, price=Decimal("10.00"), description=description)


@pytest.fixture
def products():
    return [
        _product("Canapé Milano", "Canapé", "Velours côtelé bleu"),
        _product("Table Oslo", "Table", "Frêne massif"),
        _product("Chaise Lina", "Chaise", None),
        _product("Table basse Nido", "Table", "Plateau en chêne"),
    ]


@pytest.mark.unit
def test_all_category_and_empty_search_returns_everything(products):
    assert filter_products(products, ALL_CATEGORIES, "") == products


@pytest.mark.unit
def test_category_filter_is_exact(products):
    result = filter_products(products, "Table", "")
    assert [p.name for p in result] == ["Table Oslo", "Table basse Nido"]


@pytest.mark.unit
def test_search_is_case_insensitive_on_name(products):
    result = filter_products(products, ALL_CATEGORIES, "MILANO")
    assert [p.name for p in result] == ["Canapé Milano"]


@pytest.mark.unit
def test_search_matches_description(products):
    result = filter_products(products, ALL_CATEGORIES, "chêne")
    assert [p.name for p in result] == ["Table basse Nido"]


@pytest.mark.unit
def test_missing_description_does_not_break_search(products):
    result = filter_products(products, ALL_CATEGORIES, "lina")
    assert [p.name for p in result] == ["Chaise Lina"]


@pytest.mark.unit
def test_category_and_search_combine(products):
    assert [p.name for p in filter_products(products, "Table", "oslo")] == ["Table Oslo"]
    assert filter_products(products, "Chaise", "oslo") == []


@pytest.mark.unit
def test_categories_are_distinct_in_first_seen_order(products):
    assert categories(products) == [ALL_CATEGORIES, "Canapé", "Table", "Chaise"]


@pytest.mark.unit
def test_categories_of_empty_catalog():
    assert categories([]) == [ALL_CATEGORIES]
