"""
Product generator: simple and variable products.

Relationships (upsells, cross-sells, categories, tags) are drawn from what
already exists in the catalog, so products generated after terms and other
products come out properly linked. Variable products get one variation per
combination of their attribute values.
"""
import itertools
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from faker.utils.text import slugify

from smooth_generator.generators.base import Generator
from smooth_generator.schemas.woocommerce import (
    GlobalAttribute, Product, ProductAttribute, ProductVariation,
)

logger = logging.getLogger(__name__)

PRODUCT_TYPE_WEIGHTS = {"simple": 80, "variable": 20}

# Global attributes new products may reuse; the value pools grow as products add values
GLOBAL_ATTRIBUTES: Dict[str, List[str]] = {
    "Color": ["Green", "Blue", "Red", "Yellow", "Indigo", "Violet", "Black", "White", "Orange", "Pink", "Purple"],
    "Size": ["Small", "Medium", "Large", "XL", "XXL", "XXXL"],
    "Numeric Size": [str(n) for n in range(6, 21)],
}

# --- Product name pools ---
ADJECTIVES = [
    "Small", "Ergonomic", "Rustic", "Intelligent", "Gorgeous", "Incredible", "Fantastic",
    "Practical", "Sleek", "Awesome", "Enormous", "Mediocre", "Synergistic", "Heavy Duty",
    "Lightweight", "Aerodynamic", "Durable", "Premium", "Vintage", "Handcrafted",
]
MATERIALS = [
    "Steel", "Wooden", "Concrete", "Plastic", "Cotton", "Granite", "Rubber", "Leather",
    "Silk", "Wool", "Linen", "Marble", "Iron", "Bronze", "Copper", "Aluminum", "Paper",
]
PRODUCTS = [
    "Chair", "Car", "Computer", "Gloves", "Pants", "Shirt", "Table", "Shoes", "Hat",
    "Plate", "Knife", "Bottle", "Coat", "Lamp", "Keyboard", "Bag", "Bench", "Clock",
    "Watch", "Wallet",
]

RELATIONSHIP_POOL_LIMIT = 100
RELATIONSHIP_POOL_KEEP = 50
TERM_ID_LIMIT = 50


class ProductGenerator(Generator):
    key = "products"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._product_ids: List[int] = []
        self._attribute_values: Dict[str, List[str]] = {k: list(v) for k, v in GLOBAL_ATTRIBUTES.items()}

    def generate(self, save: bool = True, **args) -> Product:
        product_type = self.get_product_type(args)
        if product_type == "variable":
            product = self.generate_variable_product(save)
        else:
            product = self.generate_simple_product()

        if save:
            self.catalog.save(product)

        if len(self._product_ids) > RELATIONSHIP_POOL_LIMIT:
            self.rng.shuffle(self._product_ids)
            self._product_ids = self._product_ids[:RELATIONSHIP_POOL_KEEP]
        if product.id:
            self._product_ids.append(product.id)

        return product

    def batch(self, amount: int, args: dict) -> List[int]:
        ids = super().batch(amount, args)
        # Term ids may have changed between batches
        self.cache.reset()
        return ids

    def get_product_type(self, args: dict) -> str:
        product_type = args.get("type")
        if product_type in PRODUCT_TYPE_WEIGHTS:
            return product_type
        return self.random_weighted_element(PRODUCT_TYPE_WEIGHTS)

    # ═══════════════════════════════════════════════════════════════
    # SIMPLE & VARIABLE
    # ═══════════════════════════════════════════════════════════════

    def generate_simple_product(self) -> Product:
        f = self.faker
        name = self.product_name()
        will_manage_stock = f.boolean()
        is_virtual = f.boolean()
        price = round(self.rng.uniform(1, 1000), 2)
        is_on_sale = f.boolean(chance_of_getting_true=30)

        return Product(
            type="simple",
            name=name,
            slug=slugify(name),
            sku=f"{slugify(name)}-{f.ean8()}",
            featured=f.boolean(),
            description="\n\n".join(f.paragraphs(nb=f.random_int(1, 5))),
            short_description=f.text(),
            regular_price=price,
            sale_price=round(self.rng.uniform(0, price), 2) if is_on_sale else None,
            date_on_sale_to=self.sale_end_date(),
            total_sales=f.random_int(0, 10000),
            manage_stock=will_manage_stock,
            stock_quantity=f.random_int(-100, 100) if will_manage_stock else None,
            backorders=f.random_element(["yes", "no", "notify"]),
            sold_individually=f.boolean(chance_of_getting_true=20),
            virtual=is_virtual,
            **self.dimensions(is_virtual),
            upsell_ids=self.get_existing_product_ids(),
            cross_sell_ids=self.get_existing_product_ids(),
            reviews_allowed=f.boolean(),
            purchase_note=f.text() if f.boolean() else "",
            menu_order=f.random_int(0, 10000),
            category_ids=self.get_term_ids("product_cat", f.random_int(0, 3)),
            tag_ids=self.get_term_ids("product_tag", f.random_int(0, 5)),
            image=self.get_image(),
            gallery=self.maybe_get_gallery(),
        )

    def generate_variable_product(self, save: bool = True) -> Product:
        f = self.faker
        name = self.product_name()
        will_manage_stock = f.boolean()

        product = Product(
            type="variable",
            name=name,
            slug=slugify(name),
            sku=f"{slugify(name)}-{f.ean8()}",
            featured=f.boolean(chance_of_getting_true=10),
            attributes=self.generate_attributes(f.random_int(1, 3), 5, save=save),
            manage_stock=will_manage_stock,
            stock_quantity=f.random_int(-100, 100) if will_manage_stock else None,
            backorders=f.random_element(["yes", "no", "notify"]),
            sold_individually=f.boolean(chance_of_getting_true=20),
            upsell_ids=self.get_existing_product_ids(),
            cross_sell_ids=self.get_existing_product_ids(),
            image=self.get_image(),
            category_ids=self.get_term_ids("product_cat", f.random_int(0, 3)),
            tag_ids=self.get_term_ids("product_tag", f.random_int(0, 5)),
            gallery=self.maybe_get_gallery(),
            reviews_allowed=f.boolean(),
            purchase_note=f.text() if f.boolean() else "",
            menu_order=f.random_int(0, 10000),
        )
        if not save:
            # Variations need a saved parent to hang off
            return product
        self.catalog.save(product)

        variation_attributes = [a for a in product.attributes if a.variation and a.options]
        combinations = list(itertools.product(*(a.options for a in variation_attributes)))
        for combination in reversed(combinations):
            self.catalog.save(self.generate_variation(
                product,
                {a.name: value for a, value in zip(variation_attributes, combination)},
                will_manage_stock,
            ))

        return product

    def generate_variation(self, parent: Product, attributes: Dict[str, str], manage_stock: bool) -> ProductVariation:
        f = self.faker
        price = round(self.rng.uniform(1, 1000), 2)
        is_on_sale = f.boolean(chance_of_getting_true=30)
        is_virtual = f.boolean(chance_of_getting_true=20)
        return ProductVariation(
            parent_id=parent.id,
            attributes=attributes,
            regular_price=price,
            sale_price=round(self.rng.uniform(0, price), 2) if is_on_sale else None,
            date_on_sale_to=self.sale_end_date(),
            manage_stock=manage_stock,
            stock_quantity=f.random_int(-20, 100) if manage_stock else None,
            virtual=is_virtual,
            **self.dimensions(is_virtual),
            image=self.get_image(),
        )

    # ═══════════════════════════════════════════════════════════════
    # ATTRIBUTES
    # ═══════════════════════════════════════════════════════════════

    def generate_attributes(self, qty: int = 1, maximum_terms: int = 10, save: bool = True) -> List[ProductAttribute]:
        f = self.faker
        used_names: List[str] = []
        attributes: List[ProductAttribute] = []

        for position in range(qty):
            if f.boolean():
                raw_name = f.random_element(list(self._attribute_values))
                if raw_name in used_names:
                    raw_name = f.word()[:28].capitalize()
                used_names.append(raw_name)

                global_attribute = self.get_or_create_global_attribute(raw_name, save)
                existing_values = list(self._attribute_values.setdefault(raw_name, []))
                values: List[str] = []
                for _ in range(f.random_int(1, maximum_terms)):
                    value = ""
                    if existing_values and f.boolean(chance_of_getting_true=80):
                        self.rng.shuffle(existing_values)
                        value = existing_values.pop()
                    if not value or value in values:
                        value = " ".join(f.words(nb=f.random_int(1, 2))).capitalize()
                    self._attribute_values[raw_name].append(value)
                    values.append(value)

                attributes.append(ProductAttribute(
                    id=global_attribute.id,
                    name=global_attribute.slug,
                    position=position,
                    options=values,
                ))
            else:
                attributes.append(ProductAttribute(
                    name=" ".join(f.words(nb=f.random_int(1, 3))).capitalize(),
                    position=position,
                    options=[w.capitalize() for w in f.words(nb=f.random_int(2, 4)) if w],
                ))

        return attributes

    def get_or_create_global_attribute(self, raw_name: str, save: bool = True) -> GlobalAttribute:
        slug = "pa_" + slugify(raw_name).replace("-", "_")[:28]
        existing = self.catalog.global_attribute(slug)
        if existing:
            return existing
        attribute = GlobalAttribute(name=raw_name, slug=slug)
        if not save:
            return attribute
        logger.info(f"[Products] Creating global attribute '{raw_name}' ({slug})")
        return self.catalog.save(attribute)

    # ═══════════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════════

    def product_name(self) -> str:
        return " ".join([
            self.faker.random_element(ADJECTIVES),
            self.faker.random_element(MATERIALS),
            self.faker.random_element(PRODUCTS),
        ])

    def dimensions(self, is_virtual: bool) -> Dict[str, Optional[int]]:
        if is_virtual:
            return {"weight": None, "length": None, "width": None, "height": None}
        return {k: self.faker.random_int(1, 200) for k in ("weight", "length", "width", "height")}

    def sale_end_date(self) -> datetime:
        return self.faker.date_time_between(start_date="now", end_date=datetime.now() + timedelta(days=30))

    def get_term_ids(self, taxonomy: str, limit: int) -> List[int]:
        """Up to `limit` random term ids of a taxonomy, from a cached pool of at most 50."""
        if limit <= 0:
            return []
        if not self.cache.exists(taxonomy):
            exclude = ["uncategorized"] if taxonomy == "product_cat" else []
            self.cache.set(taxonomy, self.catalog.term_ids(taxonomy, TERM_ID_LIMIT, exclude))
        self.cache.shuffle(taxonomy)
        return self.cache.get(taxonomy, limit)

    def get_existing_product_ids(self, limit: int = 5) -> List[int]:
        if not self._product_ids:
            self._product_ids = self.catalog.random_ids(Product.object_type, limit, status="publish")

        random_limit = self.faker.random_int(0, limit)
        if not random_limit:
            return []

        self.rng.shuffle(self._product_ids)
        return self._product_ids[:random_limit]

    def get_image(self) -> str:
        return self.faker.image_url()

    def maybe_get_gallery(self) -> List[str]:
        if not self.faker.boolean(chance_of_getting_true=10):
            return []
        return [self.get_image() for _ in range(self.faker.random_int(0, 3))]

