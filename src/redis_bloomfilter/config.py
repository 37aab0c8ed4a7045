"""Configuration management for the Redis Bloom filter."""

import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv
import structlog

from .core.errors import ConfigurationError
from .filter.parameters import MAX_BITS, optimal_parameters, raw_parameters

DEFAULT_KEY_NAME = "redis-bloomfilter"
DEFAULT_CAPACITY = 100000
DEFAULT_ERROR_RATE = 0.01
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DRIVER_NAMES = frozenset({"auto", "lua", "pipeline"})

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FilterConfig:
    """Immutable filter options, validated before any Redis call is made.

    Attributes:
        capacity: Number of elements the first generation is sized for
        error_rate: Target false-positive probability
        key_name: Redis key (or key prefix for scaling filters)
        bits: Nominal bit-vector length for ``capacity`` elements
        hashes: Nominal number of hash functions
    """

    capacity: int
    error_rate: float
    key_name: str = DEFAULT_KEY_NAME
    bits: int = field(init=False)
    hashes: int = field(init=False)

    def __post_init__(self) -> None:
        if isinstance(self.capacity, bool) or not isinstance(self.capacity, int):
            raise ConfigurationError("capacity must be an integer", {"capacity": self.capacity})
        if isinstance(self.error_rate, bool) or not isinstance(self.error_rate, (int, float)):
            raise ConfigurationError("error_rate must be a number", {"error_rate": self.error_rate})
        if not isinstance(self.key_name, str) or not self.key_name:
            raise ConfigurationError("key_name must be a non-empty string", {"key_name": self.key_name})
        # Stored vectors start at generation 1, so that is what must be usable.
        first_bits, _ = optimal_parameters(self.capacity, self.error_rate, 1)
        if first_bits > MAX_BITS:
            raise ConfigurationError(
                "capacity needs more bits than a Redis string can address",
                {"capacity": self.capacity, "bits": first_bits, "max_bits": MAX_BITS},
            )
        bits, hashes = raw_parameters(self.capacity, self.error_rate, 0)
        object.__setattr__(self, "bits", max(1, bits))
        object.__setattr__(self, "hashes", max(1, hashes))


@dataclass(frozen=True)
class Settings:
    """Settings loaded from environment variables."""

    redis_url: str
    key_name: str
    capacity: int
    error_rate: float
    driver: str

    def filter_config(self) -> FilterConfig:
        return FilterConfig(
            capacity=self.capacity,
            error_rate=self.error_rate,
            key_name=self.key_name,
        )


def load_settings() -> Settings:
    """
    Load settings from environment variables.

    Returns:
        Settings instance with all configuration values

    Raises:
        ValueError: If a variable holds an invalid value
    """
    load_dotenv()

    redis_url = os.getenv("BLOOMFILTER_REDIS_URL", DEFAULT_REDIS_URL).strip()
    key_name = os.getenv("BLOOMFILTER_KEY_NAME", DEFAULT_KEY_NAME).strip()
    driver = os.getenv("BLOOMFILTER_DRIVER", "auto").strip().lower()

    try:
        capacity = int(os.getenv("BLOOMFILTER_CAPACITY", str(DEFAULT_CAPACITY)))
    except ValueError as exc:
        raise ValueError(
            "BLOOMFILTER_CAPACITY must be a valid integer. Check your .env file."
        ) from exc
    try:
        error_rate = float(os.getenv("BLOOMFILTER_ERROR_RATE", str(DEFAULT_ERROR_RATE)))
    except ValueError as exc:
        raise ValueError(
            "BLOOMFILTER_ERROR_RATE must be a valid number. Check your .env file."
        ) from exc

    if not redis_url:
        raise ValueError("BLOOMFILTER_REDIS_URL must not be empty.")
    if not key_name:
        raise ValueError("BLOOMFILTER_KEY_NAME must not be empty.")
    if capacity < 1:
        raise ValueError("BLOOMFILTER_CAPACITY must be >= 1.")
    if not 0 < error_rate < 1:
        raise ValueError("BLOOMFILTER_ERROR_RATE must be between 0 and 1.")
    if driver not in DRIVER_NAMES:
        raise ValueError("BLOOMFILTER_DRIVER must be 'auto', 'lua' or 'pipeline'.")

    logger.debug(
        "bloomfilter_settings_loaded",
        key_name=key_name,
        capacity=capacity,
        error_rate=error_rate,
        driver=driver,
    )
    return Settings(
        redis_url=redis_url,
        key_name=key_name,
        capacity=capacity,
        error_rate=error_rate,
        driver=driver,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once
    per process lifetime.
    """
    return load_settings()
