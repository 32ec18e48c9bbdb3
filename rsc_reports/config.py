"""Configuration management for RSC reports.

Settings come from a YAML file, with the connection URL and access token
overridable from the environment so tokens need not live on disk.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

ENV_CONFIG = "RSC_REPORTS_CONFIG"
ENV_URL = "RSC_URL"
ENV_TOKEN = "RSC_ACCESS_TOKEN"


class ConfigError(ValueError):
    """Configuration is missing or invalid."""


@dataclass
class RSCSettings:
    """Connection settings for one RSC tenant."""

    url: Optional[str] = None  # https://<tenant>.my.rubrik.com
    access_token: Optional[str] = None
    timeout: int = 60  # seconds
    verify: bool = True
    ca_bundle: Optional[str] = None


@dataclass
class RetryConfig:
    """Transport retry policy (urllib3 Retry)."""

    total: int = 3
    backoff_factor: float = 0.5
    status_forcelist: List[int] = field(default_factory=lambda: [429, 502, 503, 504])


@dataclass
class ReportConfig:
    """Defaults for report runs."""

    page_size: Optional[int] = None  # None: per-query default
    days_to_report: int = 7
    backup_window_end_hour: int = 0  # UTC
    skip_days: int = 0
    cache_max_age: Optional[int] = None  # seconds; None never expires
    verbose: bool = False

    @property
    def cache_max_age_delta(self) -> Optional[timedelta]:
        if self.cache_max_age is None:
            return None
        return timedelta(seconds=self.cache_max_age)


@dataclass
class Config:
    """Main configuration container."""

    rsc: RSCSettings = field(default_factory=RSCSettings)
    retry: RetryConfig = field(default_factory=RetryConfig)
    reports: ReportConfig = field(default_factory=ReportConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create config from dictionary."""
        rsc_data = data.get("rsc", {}) or {}
        rsc = RSCSettings(
            url=rsc_data.get("url"),
            access_token=rsc_data.get("access_token"),
            timeout=rsc_data.get("timeout", 60),
            verify=rsc_data.get("verify", True),
            ca_bundle=rsc_data.get("ca_bundle"),
        )

        retry_data = data.get("retry", {}) or {}
        retry = RetryConfig(
            total=retry_data.get("total", 3),
            backoff_factor=retry_data.get("backoff_factor", 0.5),
            status_forcelist=list(retry_data.get("status_forcelist", [429, 502, 503, 504])),
        )

        rep_data = data.get("reports", {}) or {}
        reports = ReportConfig(
            page_size=rep_data.get("page_size"),
            days_to_report=rep_data.get("days_to_report", 7),
            backup_window_end_hour=rep_data.get("backup_window_end_hour", 0),
            skip_days=rep_data.get("skip_days", 0),
            cache_max_age=rep_data.get("cache_max_age"),
            verbose=rep_data.get("verbose", False),
        )

        return cls(rsc=rsc, retry=retry, reports=reports)

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load config from YAML file."""
        if not path.exists():
            return cls()
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping at the top level")
        return cls.from_dict(data)

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """Load config from path or defaults, then apply env overrides.

        Checks in order:
        1. Provided path
        2. RSC_REPORTS_CONFIG env var
        3. ./configs/config.yaml
        4. ./config.yaml
        5. ~/.rsc_reports/config.yaml
        6. Default config
        """
        if config_path and not Path(config_path).exists():
            raise ConfigError(f"Config file not found: {config_path}")

        paths_to_try = []

        if config_path:
            paths_to_try.append(Path(config_path))

        if env_path := os.environ.get(ENV_CONFIG):
            paths_to_try.append(Path(env_path))

        paths_to_try.extend([
            Path("./configs/config.yaml"),
            Path("./config.yaml"),
            Path.home() / ".rsc_reports" / "config.yaml",
        ])

        config = cls()
        for path in paths_to_try:
            if path.exists():
                config = cls.from_yaml(path)
                break

        config.apply_env()
        return config

    def apply_env(self, environ: Optional[Dict[str, str]] = None) -> None:
        """Override URL and token from RSC_URL / RSC_ACCESS_TOKEN."""
        env = os.environ if environ is None else environ
        if env.get(ENV_URL):
            self.rsc.url = env[ENV_URL]
        if env.get(ENV_TOKEN):
            self.rsc.access_token = env[ENV_TOKEN]

    def validate(self) -> None:
        """Raise ConfigError if the config cannot be used to connect."""
        if not self.rsc.url:
            raise ConfigError(f"RSC URL is not set (rsc.url or {ENV_URL})")
        if not self.rsc.access_token:
            raise ConfigError(f"Access token is not set (rsc.access_token or {ENV_TOKEN})")
        if not 0 <= self.reports.backup_window_end_hour <= 23:
            raise ConfigError("reports.backup_window_end_hour must be between 0 and 23")
        if self.reports.days_to_report < 1:
            raise ConfigError("reports.days_to_report must be at least 1")

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary. The access token is redacted."""
        return {
            "rsc": {
                "url": self.rsc.url,
                "access_token": "***" if self.rsc.access_token else None,
                "timeout": self.rsc.timeout,
                "verify": self.rsc.verify,
                "ca_bundle": self.rsc.ca_bundle,
            },
            "retry": {
                "total": self.retry.total,
                "backoff_factor": self.retry.backoff_factor,
                "status_forcelist": list(self.retry.status_forcelist),
            },
            "reports": {
                "page_size": self.reports.page_size,
                "days_to_report": self.reports.days_to_report,
                "backup_window_end_hour": self.reports.backup_window_end_hour,
                "skip_days": self.reports.skip_days,
                "cache_max_age": self.reports.cache_max_age,
                "verbose": self.reports.verbose,
            },
        }
