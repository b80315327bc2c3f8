"""Object generators and the registry the batch driver resolves them from."""

from .base import GenerationResult, Generator  # noqa: F401
from .registry import GeneratorRegistry, build_registry  # noqa: F401

__all__ = [
    "GenerationResult",
    "Generator",
    "GeneratorRegistry",
    "build_registry",
]
