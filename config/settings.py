"""
Centralized configuration management for the data explorer.

Handles environment variables, hosted-store config, profiler thresholds and
the locale gazetteer used for geographic column detection.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple


@dataclass
class DatabaseConfig:
    """Hosted tabular store connection configuration."""

    host: str
    port: int
    database: str
    username: str
    password: str
    driver: str = "postgresql"  # postgresql, sqlite
    pool_size: int = 5
    max_overflow: int = 10

    @property
    def connection_string(self) -> str:
        """Generate SQLAlchemy connection string."""
        if self.driver == "sqlite":
            return f"sqlite:///{self.database}"

        return (
            f"{self.driver}://{self.username}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """Load database config from environment variables."""
        return cls(
            host=os.getenv("DB_HOST", "localhost"),
            port=int(os.getenv("DB_PORT", "5432")),
            database=os.getenv("DB_NAME", "postgres"),
            username=os.getenv("DB_USER", "postgres"),
            password=os.getenv("DB_PASSWORD", ""),
            driver=os.getenv("DB_DRIVER", "postgresql"),
            pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
            max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "10"))
        )


@dataclass(frozen=True)
class GazetteerEntry:
    """Place names that identify one geographic category."""

    category: str
    names: Tuple[str, ...]


DEFAULT_GAZETTEER: List[GazetteerEntry] = [
    GazetteerEntry(
        category="state",
        names=(
            "andhra pradesh", "arunachal pradesh", "assam", "bihar",
            "chhattisgarh", "goa", "gujarat", "haryana", "himachal pradesh",
            "jharkhand", "karnataka", "kerala", "madhya pradesh",
            "maharashtra", "manipur", "meghalaya", "mizoram", "nagaland",
            "odisha", "punjab", "rajasthan", "sikkim", "tamil nadu",
            "telangana", "tripura", "uttar pradesh", "uttarakhand",
            "west bengal", "delhi", "jammu", "kashmir", "ladakh",
            "puducherry", "chandigarh", "lakshadweep", "andaman",
        ),
    ),
]


def load_gazetteer(path: Optional[str]) -> List[GazetteerEntry]:
    """
    Load a gazetteer from a JSON file.

    The file holds an ordered list of ``{"category": ..., "names": [...]}``
    objects. Without a path the built-in gazetteer is returned.
    """
    if not path:
        return list(DEFAULT_GAZETTEER)

    with open(path, mode="r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError("Gazetteer file must contain a list of entries")

    entries = []
    for item in raw:
        category = item.get("category")
        names = item.get("names") or []
        if not category:
            raise ValueError("Gazetteer entries require a category")
        entries.append(
            GazetteerEntry(
                category=str(category).lower(),
                names=tuple(str(name).lower() for name in names),
            )
        )
    return entries


@dataclass
class ProfilerConfig:
    """Thresholds used by the tabular profiler."""

    numeric_threshold: float = 0.5
    outlier_sigma: float = 2.0
    min_outlier_samples: int = 6
    min_unique_samples: int = 4
    duplication_ratio: float = 0.8

    small_dataset_rows: int = 100
    medium_dataset_rows: int = 1000

    example_values: int = 3
    category_filter_max_distinct: int = 10
    category_filter_values: int = 5
    histogram_bins: int = 8
    frequency_top_n: int = 10
    geo_sample_size: int = 5

    gazetteer: List[GazetteerEntry] = field(
        default_factory=lambda: list(DEFAULT_GAZETTEER)
    )

    @classmethod
    def from_env(cls) -> "ProfilerConfig":
        """Load profiler config from environment variables."""
        return cls(
            numeric_threshold=float(os.getenv("PROFILER_NUMERIC_THRESHOLD", "0.5")),
            outlier_sigma=float(os.getenv("PROFILER_OUTLIER_SIGMA", "2.0")),
            min_outlier_samples=int(os.getenv("PROFILER_MIN_OUTLIER_SAMPLES", "6")),
            min_unique_samples=int(os.getenv("PROFILER_MIN_UNIQUE_SAMPLES", "4")),
            duplication_ratio=float(os.getenv("PROFILER_DUPLICATION_RATIO", "0.8")),
            small_dataset_rows=int(os.getenv("PROFILER_SMALL_DATASET_ROWS", "100")),
            medium_dataset_rows=int(os.getenv("PROFILER_MEDIUM_DATASET_ROWS", "1000")),
            example_values=int(os.getenv("PROFILER_EXAMPLE_VALUES", "3")),
            category_filter_max_distinct=int(os.getenv("PROFILER_CATEGORY_MAX_DISTINCT", "10")),
            category_filter_values=int(os.getenv("PROFILER_CATEGORY_VALUES", "5")),
            histogram_bins=int(os.getenv("PROFILER_HISTOGRAM_BINS", "8")),
            frequency_top_n=int(os.getenv("PROFILER_FREQUENCY_TOP_N", "10")),
            geo_sample_size=int(os.getenv("PROFILER_GEO_SAMPLE_SIZE", "5")),
            gazetteer=load_gazetteer(os.getenv("PROFILER_GAZETTEER")),
        )


@dataclass
class AppConfig:
    """Application-level configuration."""

    title: str = "Data Explorer"
    log_level: str = "INFO"

    # Data handling
    preview_rows: int = 20
    page_size: int = 50
    max_rows_load: int = 10000

    # Sessions
    session_ttl: int = 3600  # seconds
    cors_origins: Tuple[str, ...] = ("http://localhost:5173", "http://127.0.0.1:5173")

    # Optional remote narrative endpoint
    narrative_url: Optional[str] = None
    narrative_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load app config from environment variables."""
        origins = os.getenv("CORS_ORIGINS")
        return cls(
            title=os.getenv("APP_TITLE", "Data Explorer"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            preview_rows=int(os.getenv("PREVIEW_ROWS", "20")),
            page_size=int(os.getenv("PAGE_SIZE", "50")),
            max_rows_load=int(os.getenv("MAX_ROWS_LOAD", "10000")),
            session_ttl=int(os.getenv("SESSION_TTL", "3600")),
            cors_origins=(
                tuple(o.strip() for o in origins.split(",") if o.strip())
                if origins
                else cls.cors_origins
            ),
            narrative_url=os.getenv("NARRATIVE_URL") or None,
            narrative_timeout=float(os.getenv("NARRATIVE_TIMEOUT", "30")),
        )


class Config:
    """Global configuration manager."""

    _instance: Optional["Config"] = None

    def __init__(self):
        self.db = DatabaseConfig.from_env()
        self.app = AppConfig.from_env()
        self.profiler = ProfilerConfig.from_env()
        self.root_dir = Path(__file__).parent.parent

    @classmethod
    def load(cls) -> "Config":
        """Singleton pattern - load or return existing config."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance
