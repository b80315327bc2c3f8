"""
Generator base: shared plumbing for every object generator.

A generator makes one object per generate() call and saves it to the
store catalog. bulk_generate() is what the batch driver calls: it validates
the amount against the generator's cap, runs generate() that many times and
reports back an explicit GenerationResult instead of raising.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from faker import Faker

from smooth_generator.catalog import StoreCatalog
from smooth_generator.schemas.woocommerce import StoreObject
from smooth_generator.utils.random_cache import RandomRuntimeCache

logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCH_SIZE = 100


@dataclass
class GenerationResult:
    ids: List[int] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def count(self) -> int:
        return len(self.ids)

    @classmethod
    def success(cls, ids: List[int]) -> "GenerationResult":
        return cls(ids=list(ids))

    @classmethod
    def failure(cls, error: str) -> "GenerationResult":
        return cls(error=error)


class Generator:
    key: str = ""

    def __init__(
        self,
        catalog: StoreCatalog,
        faker: Optional[Faker] = None,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        cache: Optional[RandomRuntimeCache] = None,
    ):
        self.catalog = catalog
        self.faker = faker or Faker()
        self.rng = self.faker.random
        self.cache = cache or RandomRuntimeCache(self.rng)
        self.max_batch_size = max_batch_size

    def generate(self, save: bool = True, **args) -> StoreObject:
        raise NotImplementedError

    def validate_batch_amount(self, amount: Any) -> int:
        try:
            amount = int(amount)
        except (TypeError, ValueError):
            amount = 0
        if amount < 1 or amount > self.max_batch_size:
            raise ValueError(f"Batch amount must be a number between 1 and {self.max_batch_size}.")
        return amount

    def random_weighted_element(self, weights: Dict[str, int]) -> str:
        """Pick a key with probability proportional to its weight."""
        keys = list(weights)
        return self.rng.choices(keys, weights=[weights[k] for k in keys], k=1)[0]

    def bulk_generate(self, amount: int, parameters: Optional[Dict[str, Any]] = None) -> GenerationResult:
        # CLI-style keys (date-start) and API-style keys (date_start) mean the same thing
        args = {str(k).replace("-", "_"): v for k, v in (parameters or {}).items()}
        try:
            amount = self.validate_batch_amount(amount)
            ids = self.batch(amount, args)
        except ValueError as e:
            logger.warning(f"[{type(self).__name__}] Batch of {amount} rejected: {e}")
            return GenerationResult.failure(str(e))
        return GenerationResult.success(ids)

    def batch(self, amount: int, args: Dict[str, Any]) -> List[int]:
        return [self.generate(True, **args).id for _ in range(amount)]
