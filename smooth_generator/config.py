# smooth_generator/config.py
import os
import yaml
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from pathlib import Path

DEFAULT_CONFIG_PATH = "smoothgenerator.yaml"


class GeneratorConfig(BaseModel):
    """
    Per-generator levers. max_batch_size is the cap the batch driver
    uses when slicing a job into chunks.
    """
    max_batch_size: int = Field(default=100, ge=1)


class GeneratorRegistryConfig(BaseModel):
    coupons: GeneratorConfig = GeneratorConfig()
    customers: GeneratorConfig = GeneratorConfig()
    orders: GeneratorConfig = GeneratorConfig()
    products: GeneratorConfig = GeneratorConfig()
    terms: GeneratorConfig = GeneratorConfig()

    def caps(self) -> Dict[str, int]:
        """Return max batch sizes keyed by generator key."""
        return {
            "coupons": self.coupons.max_batch_size,
            "customers": self.customers.max_batch_size,
            "orders": self.orders.max_batch_size,
            "products": self.products.max_batch_size,
            "terms": self.terms.max_batch_size,
        }


class StoreConfig(BaseModel):
    """What the store sells and where: drives currency and customer geo."""
    url: str = "https://example.com"
    currency: str = "USD"
    allowed_countries: List[str] = ["US", "CA", "GB", "DE", "FR", "ES", "AU", "JP", "BR"]


class AdminConfig(BaseModel):
    default_num_products: int = 10
    default_num_orders: int = 10


class SchedulerConfig(BaseModel):
    # Consecutive failed batches before the controller gives up on a job
    max_consecutive_failures: int = Field(default=3, ge=1)
    # Compare-and-swap attempts for a single progress update
    max_cas_retries: int = Field(default=5, ge=1)


class Settings(BaseModel):
    db_path: str = ":memory:"
    seed: Optional[int] = None
    store: StoreConfig = Field(default_factory=StoreConfig)
    generators: GeneratorRegistryConfig = Field(default_factory=GeneratorRegistryConfig)
    admin: AdminConfig = Field(default_factory=AdminConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Load settings from YAML, then apply environment overrides.

    Resolution order for the file: explicit path, SMOOTHGEN_CONFIG,
    ./smoothgenerator.yaml. A missing file means defaults.
    """
    config_path = Path(path or os.environ.get("SMOOTHGEN_CONFIG", DEFAULT_CONFIG_PATH))
    raw = {}
    if config_path.exists():
        with open(config_path, "r") as f:
            raw = yaml.safe_load(f) or {}

    db_path = os.environ.get("SMOOTHGEN_DB_PATH")
    if db_path:
        raw["db_path"] = db_path

    seed = os.environ.get("SMOOTHGEN_SEED")
    if seed:
        raw["seed"] = int(seed)

    return Settings(**raw)
