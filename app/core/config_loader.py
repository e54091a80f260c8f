"""Site configuration loader.

This module provides SiteConfigService for loading and caching the YAML
site configuration: video channels and models, chat models used for prompt
processing, image channels, prompt policy and pricing.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from app.config import SiteConfig
from app.core.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError
from app.core.logging import get_logger


class SiteConfigService:
    """Loads, validates and caches the site configuration file.

    Example:
        >>> service = SiteConfigService("config/site.yaml")
        >>> site = service.get()
        >>> print(site.pricing.sora_video_10s)
        100
    """

    def __init__(self, config_path: Path | str | None = None, logger: Any | None = None):
        """Initialize the config service.

        Args:
            config_path: Path to the site YAML file.
                         Defaults to ./config/site.yaml
            logger: Logger instance (defaults to the module logger)
        """
        self._logger = logger or get_logger(__name__)
        if config_path is None:
            config_path = Path("config/site.yaml")
        self.config_path = Path(config_path)
        self._cache: SiteConfig | None = None
        self._logger.info("SiteConfigService initialized", config_path=str(self.config_path))

    def get(self, *, use_cache: bool = True) -> SiteConfig:
        """Get the site configuration.

        Args:
            use_cache: Whether to use the cached config if available

        Returns:
            Validated SiteConfig object

        Raises:
            ConfigNotFoundError: If the config file doesn't exist
            ConfigValidationError: If config validation fails
        """
        if use_cache and self._cache is not None:
            return self._cache

        config = self._load()
        self._cache = config
        return config

    def reload(self) -> SiteConfig:
        """Reload the site configuration from disk.

        Returns:
            Reloaded SiteConfig object
        """
        self._logger.info("Reloading site config", config_path=str(self.config_path))
        self._cache = None
        return self.get(use_cache=False)

    def validate(self, config_path: Path | str | None = None) -> tuple[bool, list[str]]:
        """Validate a config file without loading it into cache.

        Args:
            config_path: Path to the config file (defaults to the service path)

        Returns:
            Tuple of (is_valid, error_messages)
        """
        path = Path(config_path) if config_path is not None else self.config_path

        if not path.exists():
            return False, [f"File does not exist: {path}"]

        try:
            self._validate_config(self._load_yaml(path), path)
            return True, []
        except ConfigError as e:
            return False, [str(e)]

    def clear_cache(self) -> None:
        """Clear the configuration cache."""
        self._logger.info("Clearing site config cache")
        self._cache = None

    # =========================================================================
    # Private Methods
    # =========================================================================

    def _load(self) -> SiteConfig:
        """Load and validate the site configuration file.

        Returns:
            Validated SiteConfig object

        Raises:
            ConfigNotFoundError: If the config file doesn't exist
            ConfigValidationError: If config validation fails
            ConfigError: For other configuration errors
        """
        if not self.config_path.exists():
            self._logger.error("Site config not found", path=str(self.config_path))
            raise ConfigNotFoundError("site_config", config_path=str(self.config_path))

        self._logger.debug("Loading site config", path=str(self.config_path))
        raw_config = self._load_yaml(self.config_path)
        config = self._validate_config(raw_config, self.config_path)
        self._logger.info(
            "Site config loaded",
            video_channels=len(config.video_channels),
            video_models=len(config.video_models),
            chat_models=len(config.chat_models),
        )
        return config

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        """Load YAML file from disk.

        Args:
            path: Path to YAML file

        Returns:
            Parsed YAML content (an empty file yields an empty dict)

        Raises:
            ConfigError: If YAML parsing fails
        """
        try:
            with open(path, encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            self._logger.error("YAML parsing failed", path=str(path), error=str(e))
            raise ConfigError(f"Invalid YAML in {path}: {e}", config_path=str(path)) from e
        except OSError as e:
            self._logger.error("Failed to read config file", path=str(path), error=str(e))
            raise ConfigError(f"Cannot read {path}: {e}", config_path=str(path)) from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigError(
                f"Config file must contain a YAML object: {path}", config_path=str(path)
            )
        return content

    def _validate_config(self, raw_config: dict[str, Any], path: Path) -> SiteConfig:
        """Validate raw config dict against schema.

        Args:
            raw_config: Raw configuration dictionary
            path: Source path for error messages

        Returns:
            Validated SiteConfig object

        Raises:
            ConfigValidationError: If validation fails
        """
        try:
            return SiteConfig(**raw_config)
        except ValidationError as e:
            error_messages = []
            for error in e.errors():
                loc = ".".join(str(loc_part) for loc_part in error["loc"])
                msg = error["msg"]
                error_messages.append(f"{loc}: {msg}" if loc else msg)

            full_error = "\n".join(error_messages)
            self._logger.error(
                "Site config validation failed", path=str(path), errors=error_messages
            )
            raise ConfigValidationError(
                f"Invalid site configuration in {path}:\n{full_error}",
                config_path=str(path),
            ) from e


__all__ = ["SiteConfigService"]
