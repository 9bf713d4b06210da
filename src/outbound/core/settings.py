"""
Settings for the outbound package.

Settings are passed explicitly to connectors and pending requests. A
process-wide default exists for convenience; replace it with configure().
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import yaml
from urllib3.filepost import encode_multipart_formdata

from .exceptions import ConfigError


logger = logging.getLogger(__name__)


DEFAULT_USER_AGENT = "Outbound/1.0 (+https://pypi.org/project/requests)"

MultipartBodyFactory = Callable[[list, str], Tuple[bytes, str]]


def default_multipart_body_factory(fields: list, boundary: str) -> Tuple[bytes, str]:
    """
    Encode multipart parts with urllib3.

    Args:
        fields: List of urllib3-style field tuples or RequestField objects
        boundary: Multipart boundary to use

    Returns:
        Tuple of (encoded body, content type header value)
    """
    return encode_multipart_formdata(fields, boundary=boundary)


@dataclass
class Settings:
    """
    Configuration for request resolution and dispatch.

    Attributes:
        user_agent: Default User-Agent header, lowest priority in the header merge
        middleware: Global middleware appended after connector and request middleware
        max_workers: Worker threads for the default requests transport
        pool_concurrency: Default concurrency for Pool when none is given
        timeout: Default transport timeout in seconds (None = no timeout)
        multipart_body_factory: Callable that materialises multipart bodies
    """
    user_agent: str = DEFAULT_USER_AGENT
    middleware: Any = None
    max_workers: int = 10
    pool_concurrency: int = 5
    timeout: Optional[float] = 30.0
    multipart_body_factory: MultipartBodyFactory = field(default=default_multipart_body_factory)

    def __post_init__(self):
        if self.middleware is None:
            from ..middleware.pipeline import MiddlewarePipeline
            self.middleware = MiddlewarePipeline()
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.pool_concurrency < 1:
            raise ConfigError(f"pool_concurrency must be at least 1, got {self.pool_concurrency}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """Create settings from a plain mapping, ignoring unknown keys."""
        known = {"user_agent", "max_workers", "pool_concurrency", "timeout"}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown settings keys: {sorted(unknown)}")

        kwargs = {k: v for k, v in data.items() if k in known}
        try:
            if "max_workers" in kwargs:
                kwargs["max_workers"] = int(kwargs["max_workers"])
            if "pool_concurrency" in kwargs:
                kwargs["pool_concurrency"] = int(kwargs["pool_concurrency"])
            if kwargs.get("timeout") is not None:
                kwargs["timeout"] = float(kwargs["timeout"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid settings value: {e}") from e

        settings = cls(**kwargs)
        settings.apply_env_overrides()
        return settings

    @classmethod
    def from_yaml(cls, config_path: Path) -> "Settings":
        """
        Load settings from a YAML file.

        The file may hold the settings at the top level or under an
        "outbound" key.

        Raises:
            ConfigError: If the file is missing or not a mapping
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        logger.info(f"Loading outbound settings from: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping: {config_path}")

        if isinstance(data.get("outbound"), dict):
            data = data["outbound"]

        return cls.from_dict(data)

    def apply_env_overrides(self) -> None:
        """Apply OUTBOUND_* environment variable overrides."""
        user_agent = os.environ.get("OUTBOUND_USER_AGENT")
        if user_agent:
            self.user_agent = user_agent

        timeout = os.environ.get("OUTBOUND_TIMEOUT")
        if timeout:
            try:
                self.timeout = float(timeout)
            except ValueError as e:
                raise ConfigError(f"OUTBOUND_TIMEOUT must be a number: {timeout}") from e

        max_workers = os.environ.get("OUTBOUND_MAX_WORKERS")
        if max_workers:
            try:
                self.max_workers = int(max_workers)
            except ValueError as e:
                raise ConfigError(f"OUTBOUND_MAX_WORKERS must be an integer: {max_workers}") from e


_default_settings: Optional[Settings] = None


def get_default_settings() -> Settings:
    """Return the process-wide default settings, creating them on first use."""
    global _default_settings
    if _default_settings is None:
        _default_settings = Settings()
        _default_settings.apply_env_overrides()
    return _default_settings


def configure(settings: Optional[Settings]) -> None:
    """Replace the process-wide default settings (None resets to defaults)."""
    global _default_settings
    _default_settings = settings
