"""
Term generator: product categories and tags.

Categories can be generated as a tree: with no parent given and a
max_depth above 1, a batch first creates a handful of top-level categories,
then up to that many children under each category of the previous level,
and keeps cycling through the levels until the amount is used up.
"""
import logging
import math
from typing import Dict, List, Optional

from faker.utils.text import slugify

from smooth_generator.generators.base import Generator
from smooth_generator.schemas.woocommerce import Term

logger = logging.getLogger(__name__)

TAXONOMIES = ["product_cat", "product_tag"]
HIERARCHICAL_TAXONOMIES = {"product_cat"}
MAX_DEPTH = 5
MAX_NAME_ATTEMPTS = 25


class TermExists(ValueError):
    def __init__(self, taxonomy: str, name: str):
        super().__init__(f'A term named "{name}" already exists in {taxonomy}.')


class TermGenerator(Generator):
    key = "terms"

    def generate(self, save: bool = True, **args) -> Term:
        """One term. Raises TermExists when the name is taken at that level."""
        taxonomy = self.get_taxonomy(args)
        parent = self.get_parent(taxonomy, args)

        name = " ".join(self.faker.words(nb=self.faker.random_int(1, 2))).title()
        if self.catalog.term_exists(taxonomy, name, parent):
            raise TermExists(taxonomy, name)

        term = Term(
            taxonomy=taxonomy,
            name=name,
            slug=slugify(name),
            parent=parent,
            description=self.faker.sentence() if self.faker.boolean() else "",
        )
        if save:
            self.catalog.save(term)
        return term

    def batch(self, amount: int, args: dict) -> List[int]:
        taxonomy = self.get_taxonomy(args)
        parent = self.get_parent(taxonomy, args)
        max_depth = self.get_max_depth(args)

        if parent or max_depth == 1 or taxonomy not in HIERARCHICAL_TAXONOMIES:
            return [self._create(taxonomy, parent).id for _ in range(amount)]
        return self.generate_hierarchy(taxonomy, amount, max_depth)

    def generate_hierarchy(self, taxonomy: str, amount: int, max_depth: int) -> List[int]:
        remaining = amount
        term_max = math.floor(math.log(amount)) if amount > 2 else 1
        levels: Dict[int, List[int]] = {level: [] for level in range(1, max_depth + 1)}
        ids: List[int] = []

        while remaining > 0:
            for level in range(1, max_depth + 1):
                if level == 1:
                    parents, counts = [0], [term_max]
                else:
                    parents = list(levels[level - 1])
                    counts = [self.rng.randint(0, term_max) for _ in parents]

                for parent, count in zip(parents, counts):
                    for _ in range(min(count, remaining)):
                        term_id = self._create(taxonomy, parent).id
                        levels[level].append(term_id)
                        ids.append(term_id)
                        remaining -= 1

        logger.info(f"[Terms] Created {len(ids)} {taxonomy} terms over {max_depth} levels")
        return ids

    def _create(self, taxonomy: str, parent: int) -> Term:
        """Generate and save a term, retrying name clashes."""
        for _ in range(MAX_NAME_ATTEMPTS):
            try:
                return self.generate(True, taxonomy=taxonomy, parent=parent)
            except TermExists:
                continue
        raise ValueError(f"Could not find an unused term name in {taxonomy} after {MAX_NAME_ATTEMPTS} attempts.")

    # ═══════════════════════════════════════════════════════════════
    # ARGUMENTS
    # ═══════════════════════════════════════════════════════════════

    def get_taxonomy(self, args: dict) -> str:
        taxonomy = args.get("taxonomy") or "product_cat"
        if taxonomy not in TAXONOMIES:
            raise ValueError(f'The taxonomy "{taxonomy}" is not supported. Use one of: {", ".join(TAXONOMIES)}.')
        return taxonomy

    def get_parent(self, taxonomy: str, args: dict) -> int:
        try:
            parent = int(args.get("parent") or 0)
        except (TypeError, ValueError):
            raise ValueError("The parent must be a term ID.") from None
        if not parent:
            return 0
        if taxonomy not in HIERARCHICAL_TAXONOMIES:
            raise ValueError(f"Terms in {taxonomy} can't have a parent.")
        existing: Optional[Term] = self.catalog.get(Term.object_type, parent)
        if existing is None or existing.taxonomy != taxonomy:
            raise ValueError(f"The parent term {parent} does not exist in {taxonomy}.")
        return parent

    def get_max_depth(self, args: dict) -> int:
        try:
            max_depth = int(args.get("max_depth") or 1)
        except (TypeError, ValueError):
            max_depth = 0
        if max_depth < 1 or max_depth > MAX_DEPTH:
            raise ValueError(f"The maximum depth must be a number between 1 and {MAX_DEPTH}.")
        return max_depth
