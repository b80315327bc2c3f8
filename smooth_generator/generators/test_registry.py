import pytest

from smooth_generator.catalog import StoreCatalog
from smooth_generator.config import Settings
from smooth_generator.errors import UnknownGenerator
from smooth_generator.generators import GeneratorRegistry, build_registry
from smooth_generator.generators.base import GenerationResult


def test_resolve_unknown_key(registry):
    assert "widgets" in registry
    assert registry.get("gizmos") is None
    with pytest.raises(UnknownGenerator, match='"gizmos"'):
        registry.resolve("gizmos")


def test_keys_are_sorted():
    registry = GeneratorRegistry()
    registry.register("zeta", object())
    registry.register("alpha", object())
    assert registry.keys() == ["alpha", "zeta"]


def test_build_registry_applies_configured_caps(catalog):
    settings = Settings(seed=1, generators={"products": {"max_batch_size": 25}, "orders": {"max_batch_size": 50}})

    registry = build_registry(catalog, settings)

    assert registry.keys() == ["coupons", "customers", "orders", "products", "terms"]
    assert registry.resolve("products").max_batch_size == 25
    assert registry.resolve("orders").max_batch_size == 50
    assert registry.resolve("terms").max_batch_size == 100


def test_orders_share_the_customer_and_coupon_generators(catalog, settings):
    registry = build_registry(catalog, settings)
    orders = registry.resolve("orders")

    assert orders.customers is registry.resolve("customers")
    assert orders.coupons is registry.resolve("coupons")
    assert orders.currency == settings.store.currency


def test_seeded_registries_generate_the_same_data(settings):
    names = []
    for _ in range(2):
        catalog = StoreCatalog(":memory:")
        registry = build_registry(catalog, settings)
        registry.resolve("coupons").bulk_generate(5, {})
        names.append([c.code for c in catalog.all("coupon")])
        catalog.close()

    assert names[0] == names[1]


def test_generation_result():
    ok = GenerationResult.success([1, 2, 3])
    failed = GenerationResult.failure("nope")

    assert ok.ok and ok.count == 3
    assert not failed.ok and failed.count == 0
    assert failed.error == "nope"
