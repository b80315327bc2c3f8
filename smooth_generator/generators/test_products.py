import math

import pytest

from smooth_generator.generators.products import ProductGenerator
from smooth_generator.schemas.woocommerce import Term


@pytest.fixture
def products(catalog, fake):
    return ProductGenerator(catalog, faker=fake, max_batch_size=10)


def test_simple_product_fields(products, catalog):
    product = products.generate(type="simple")

    assert product.id > 0
    assert product.type == "simple"
    assert 1 <= product.regular_price <= 1000
    if product.sale_price is not None:
        assert product.sale_price <= product.regular_price
    if product.virtual:
        assert product.weight is None
    else:
        assert 1 <= product.weight <= 200
    assert product.sku.startswith(product.slug)
    assert catalog.get("product", product.id).name == product.name


@pytest.mark.parametrize("run", range(5))
def test_variable_product_has_one_variation_per_combination(products, catalog, run):
    product = products.generate(type="variable")

    expected = math.prod(len(a.options) for a in product.attributes if a.variation and a.options)
    variations = catalog.variations(product.id)

    assert product.type == "variable"
    assert 1 <= len(product.attributes) <= 3
    assert len(variations) == expected
    for variation in variations:
        assert set(variation.attributes) == {a.name for a in product.attributes}


def test_global_attributes_are_reused(products, catalog):
    first = products.get_or_create_global_attribute("Color")
    second = products.get_or_create_global_attribute("Color")

    assert first.slug == "pa_color"
    assert first.id == second.id
    assert catalog.count("attribute") == 1


def test_relationships_come_from_the_catalog(products, catalog):
    catalog.save(Term(taxonomy="product_cat", name="Uncategorized", slug="uncategorized"))
    categories = {catalog.save(Term(taxonomy="product_cat", name=f"Cat {i}", slug=f"cat-{i}")).id for i in range(5)}
    tags = {catalog.save(Term(taxonomy="product_tag", name=f"Tag {i}", slug=f"tag-{i}")).id for i in range(5)}

    ids = products.bulk_generate(10, {"type": "simple"}).ids
    generated = [catalog.get("product", i) for i in ids]

    for product in generated:
        assert set(product.category_ids) <= categories
        assert set(product.tag_ids) <= tags
        assert set(product.upsell_ids) <= set(ids)
        assert product.id not in product.category_ids


def test_term_ids_are_empty_without_terms(products):
    assert products.get_term_ids("product_cat", 3) == []
    assert products.get_term_ids("product_tag", 0) == []


def test_bulk_generate_reports_ids(products, catalog):
    result = products.bulk_generate(4, {"type": "simple"})

    assert result.ok
    assert result.count == 4
    assert catalog.count("product") == 4


@pytest.mark.parametrize("amount", [0, 11, "lots"])
def test_bulk_generate_rejects_amounts_outside_the_cap(products, catalog, amount):
    result = products.bulk_generate(amount)

    assert not result.ok
    assert result.error == "Batch amount must be a number between 1 and 10."
    assert catalog.count("product") == 0


@pytest.mark.parametrize("product_type", ["simple", "variable"])
def test_unsaved_products_leave_the_catalog_alone(products, catalog, product_type):
    for _ in range(5):
        product = products.generate(False, type=product_type)
        assert product.id == 0

    assert catalog.count("product") == 0
    assert catalog.count("product_variation") == 0
    assert catalog.count("attribute") == 0
