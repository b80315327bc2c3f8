"""
Generator Registry: maps generator keys ("products", "orders", ...) to
generator instances. The batch driver resolves a job's key here.
"""
import logging
import random
from typing import Dict, List, Optional

from faker import Faker

from smooth_generator.catalog import StoreCatalog
from smooth_generator.config import Settings
from smooth_generator.errors import UnknownGenerator
from smooth_generator.generators.base import Generator
from smooth_generator.generators.coupons import CouponGenerator
from smooth_generator.generators.customer_info import CustomerInfo
from smooth_generator.generators.customers import CustomerGenerator
from smooth_generator.generators.order_attribution import OrderAttribution
from smooth_generator.generators.orders import OrderGenerator
from smooth_generator.generators.products import ProductGenerator
from smooth_generator.generators.terms import TermGenerator

logger = logging.getLogger(__name__)


class GeneratorRegistry:
    def __init__(self):
        self._generators: Dict[str, Generator] = {}

    def register(self, key: str, generator: Generator) -> None:
        self._generators[key] = generator

    def get(self, key: str) -> Optional[Generator]:
        return self._generators.get(key)

    def resolve(self, key: str) -> Generator:
        generator = self._generators.get(key)
        if generator is None:
            raise UnknownGenerator(key)
        return generator

    def keys(self) -> List[str]:
        return sorted(self._generators)

    def __contains__(self, key: str) -> bool:
        return key in self._generators


def _faker(seed: Optional[int]) -> Faker:
    faker = Faker()
    if seed is not None:
        faker.seed_instance(seed)
    return faker


def build_registry(catalog: StoreCatalog, settings: Settings) -> GeneratorRegistry:
    """Create every generator with its configured batch cap and register it under its key."""
    caps = settings.generators.caps()
    seed = settings.seed

    info = CustomerInfo(
        catalog,
        allowed_countries=settings.store.allowed_countries,
        seed=seed,
        rng=random.Random(seed),
    )
    coupons = CouponGenerator(catalog, faker=_faker(seed), max_batch_size=caps["coupons"])
    customers = CustomerGenerator(catalog, faker=_faker(seed), max_batch_size=caps["customers"], info=info)
    order_faker = _faker(seed)
    orders = OrderGenerator(
        catalog,
        faker=order_faker,
        max_batch_size=caps["orders"],
        customers=customers,
        coupons=coupons,
        attribution=OrderAttribution(order_faker.random, store_url=settings.store.url),
        currency=settings.store.currency,
    )
    products = ProductGenerator(catalog, faker=_faker(seed), max_batch_size=caps["products"])
    terms = TermGenerator(catalog, faker=_faker(seed), max_batch_size=caps["terms"])

    registry = GeneratorRegistry()
    for generator in (coupons, customers, orders, products, terms):
        registry.register(generator.key, generator)

    logger.info(f"[Registry] Registered generators: {', '.join(registry.keys())}")
    return registry
