"""
Configuration dataclasses for the whazzup feed pipeline.

This module defines the configuration structures used throughout the system:
freshness policies for the status and snapshot resources, the layout of the
working directory, logging, and the top-level pipeline configuration.
All of them are frozen; the pipeline keeps its mutable state separately.
"""

from dataclasses import dataclass, field
from pathlib import Path

from .enums import TimeUnit


DEFAULT_STATUS_URL = "https://www.ivao.aero/whazzup/status.txt"


@dataclass(frozen=True)
class FreshnessPolicy:
    """Age threshold after which a persisted resource is fetched again."""

    max_age: int
    unit: TimeUnit


@dataclass(frozen=True)
class StorageConfig:
    """Locations of the persisted artifacts."""

    work_dir: Path = Path("tmp")
    status_file: str = "ivao_status.txt"
    snapshot_file: str = "ivao_whazzup.txt"
    compressed_file: str = "whazzup.txt.gz"
    clean_file: str = "clean_whazzup.txt"
    json_file: str = "whazzup.json"

    @property
    def status_path(self) -> Path:
        return self.work_dir / self.status_file

    @property
    def snapshot_path(self) -> Path:
        return self.work_dir / self.snapshot_file

    @property
    def compressed_path(self) -> Path:
        return self.work_dir / self.compressed_file

    @property
    def clean_path(self) -> Path:
        return self.work_dir / self.clean_file

    @property
    def json_path(self) -> Path:
        return self.work_dir / self.json_file


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"  # 'debug', 'info', 'warn', 'error'
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass(frozen=True)
class PipelineConfig:
    """Main configuration combining all sub-configurations."""

    app_name: str
    status_url: str = DEFAULT_STATUS_URL
    storage: StorageConfig = field(default_factory=StorageConfig)
    status_policy: FreshnessPolicy = FreshnessPolicy(24, TimeUnit.HOURS)
    # The network only allows polling the snapshot every 5 minutes
    snapshot_policy: FreshnessPolicy = FreshnessPolicy(5, TimeUnit.MINUTES)
    create_json: bool = False
    http_timeout: float = 30.0
    feed_encoding: str = "iso-8859-1"
    logging: LoggingConfig = field(default_factory=LoggingConfig)
