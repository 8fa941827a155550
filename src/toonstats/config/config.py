"""
Configuration management for toonstats using Pydantic.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, List, Optional, Tuple, cast

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

# Beyond 8 parallel viewer requests the site starts blocking the client.
MAX_WORKERS = 8

DEFAULT_PAGE_URL = "https://www.webtoons.com/en/*/*/list?title_no={title_no}"
DEFAULT_EPISODE_URL = "https://www.webtoons.com/en/*/*/*/viewer?title_no={series_id}&episode_no={number}"

# --- Nested Configuration Models ---


class CrawlerConfig(BaseModel):
    """HTTP and worker pool settings."""

    timeout: float = Field(default=30.0, description="HTTP request timeout in seconds.")
    max_retries: int = Field(default=5, ge=0, description="Retries after the first failed attempt.")
    backoff_base: float = Field(default=1.0, ge=0, description="Delay before the first retry, doubled each time.")
    max_workers: int = Field(default=MAX_WORKERS, ge=1, description="Parallel chapter workers (capped at 8).")
    jitter_choices: Tuple[float, ...] = Field(
        default=(0.5, 1.0, 1.5), description="Candidate delays in seconds before each list page request."
    )
    user_agent: str = Field(
        default="Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) toonstats/0.1",
        description="User-Agent string for HTTP requests.",
    )
    referer: str = Field(default="https://www.webtoons.com/", description="Referer sent with every request.")

    @field_validator("jitter_choices")
    @classmethod
    def validate_jitter(cls, v: Tuple[float, ...]) -> Tuple[float, ...]:
        if not v:
            raise ValueError("jitter_choices must contain at least one delay")
        if any(choice < 0 for choice in v):
            raise ValueError("jitter_choices must not be negative")
        return v


class SeasonRule(BaseModel):
    """Maps an inclusive chapter range to a season and an optional arc."""

    start: int = Field(ge=1)
    end: int = Field(ge=1)
    season: int
    arc: Optional[str] = None
    # Chapters of the season are counted from here, e.g. to skip a prologue.
    first_chapter: int = Field(default=1, ge=0)

    @model_validator(mode="after")
    def check_range(self) -> SeasonRule:
        if self.end < self.start:
            raise ValueError(f"season rule end ({self.end}) is before start ({self.start})")
        return self


class SeriesConfig(BaseModel):
    """Describes the series being crawled."""

    filename: str = Field(default="series", description="Base name of the output file.")
    title: Optional[str] = Field(
        default=None, description="Series title for the output; read from the episode list when unset."
    )
    title_no: int = Field(default=0, ge=0, description="The site's numeric series id.")
    page_url: str = Field(default=DEFAULT_PAGE_URL, description="Episode list URL, page number is appended.")
    episode_url: str = Field(default=DEFAULT_EPISODE_URL, description="Viewer URL template.")
    episode_url_offset: int = Field(
        default=0, ge=0, description="Added to a chapter number to get the site's episode number."
    )
    skip: List[int] = Field(default_factory=list, description="Chapter numbers never fetched.")
    seasons: List[SeasonRule] = Field(default_factory=list)

    @property
    def list_url(self) -> str:
        return self.page_url.format(title_no=self.title_no)


class MonitoringConfig(BaseModel):
    """Configuration for logging."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(default=None, description="Path to log file. If None, logs to console.")

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


class OutputConfig(BaseModel):
    path: Path = Field(default=Path("./output"), description="Directory receiving date-stamped CSV folders.")


# --- Main Configuration Class ---


class Config(BaseSettings):
    crawler: CrawlerConfig = Field(default_factory=CrawlerConfig)
    series: SeriesConfig = Field(default_factory=SeriesConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    model_config = SettingsConfigDict(env_prefix="TOONSTATS_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for path in (current_dir / "toonstats.yaml", current_dir / "toonstats.yml"):
        if path.exists():
            return path
    return None


# --- Lazy Configuration Loader ---


class LazyConfig:
    """
    A proxy for the Config object that delays loading until an attribute
    is first accessed, so a broken config file does not fail on import.
    """

    _config: ClassVar[Config | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        if self.__class__._config is None:
            with self.__class__._lock:
                if self.__class__._config is None:
                    self.__class__._config = self._load_config_with_fallback()
        return getattr(self.__class__._config, name)

    def _load_config_with_fallback(self) -> Config:
        config_path = find_config_file()
        if config_path:
            try:
                log.info("Lazy loading configuration from: %s", config_path)
                return Config.from_yaml(config_path)
            except (ValidationError, FileNotFoundError, yaml.YAMLError) as e:
                log.error(
                    "Failed to load or validate configuration from '%s': %s. Falling back to default settings.",
                    config_path,
                    e,
                )
        else:
            log.info("No config file found. Using default settings for lazy load.")

        try:
            return Config()
        except ValidationError as e:
            log.critical("FATAL: Default configuration is invalid: %s", e, exc_info=True)
            raise RuntimeError(f"Default configuration is invalid, cannot start: {e}") from e


settings: "Config" = cast("Config", LazyConfig())
