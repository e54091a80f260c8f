"""Tests for config loader."""

from unittest.mock import MagicMock

import pytest

from app.config import SiteConfig
from app.core.config_loader import SiteConfigService
from app.core.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError


@pytest.mark.unit
class TestSiteConfigService:
    """Tests for SiteConfigService."""

    def test_default_path(self):
        """Test the default config path."""
        service = SiteConfigService()
        assert str(service.config_path) == "config/site.yaml"

    def test_load_valid_config(self, write_site_config, site_config_data):
        """Test loading a valid config file."""
        path = write_site_config(site_config_data)
        service = SiteConfigService(path)

        config = service.get()

        assert isinstance(config, SiteConfig)
        assert len(config.video_channels) == 4
        assert config.prompt_processing.blocklist_enabled is True

    def test_get_uses_cache(self, write_site_config, site_config_data):
        """Test repeated get() returns the cached instance."""
        path = write_site_config(site_config_data)
        service = SiteConfigService(path)

        first = service.get()
        path.write_text("video_channels: []\n", encoding="utf-8")

        assert service.get() is first
        assert service.get(use_cache=False) is not first

    def test_reload_reads_disk(self, write_site_config, site_config_data):
        """Test reload picks up file changes."""
        path = write_site_config(site_config_data)
        service = SiteConfigService(path)
        service.get()

        site_config_data["pricing"]["sora_video_10s"] = 7
        write_site_config(site_config_data)

        assert service.reload().pricing.sora_video_10s == 7

    def test_clear_cache(self, write_site_config, site_config_data):
        """Test clear_cache drops the cached config."""
        path = write_site_config(site_config_data)
        service = SiteConfigService(path)
        first = service.get()

        service.clear_cache()

        assert service.get() is not first

    def test_missing_file(self, tmp_path):
        """Test a missing file raises ConfigNotFoundError."""
        service = SiteConfigService(tmp_path / "missing.yaml")

        with pytest.raises(ConfigNotFoundError):
            service.get()

    def test_missing_file_logged_to_injected_logger(self, tmp_path):
        """Test the service logs through the logger it was given."""
        logger = MagicMock()
        service = SiteConfigService(tmp_path / "missing.yaml", logger=logger)

        with pytest.raises(ConfigNotFoundError):
            service.get()

        logger.info.assert_called_once()
        logger.error.assert_called_once()
        assert logger.error.call_args.args[0] == "Site config not found"

    def test_empty_file_gives_defaults(self, tmp_path):
        """Test an empty file produces an empty site config."""
        path = tmp_path / "site.yaml"
        path.write_text("", encoding="utf-8")

        config = SiteConfigService(path).get()

        assert config.video_models == []
        assert config.pricing.sora_video_10s == 100

    def test_invalid_yaml(self, tmp_path):
        """Test malformed YAML raises ConfigError."""
        path = tmp_path / "site.yaml"
        path.write_text("video_channels: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            SiteConfigService(path).get()

        assert "Invalid YAML" in str(exc_info.value)

    def test_non_mapping_yaml(self, tmp_path):
        """Test a YAML list at top level is rejected."""
        path = tmp_path / "site.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            SiteConfigService(path).get()

    def test_validation_error(self, write_site_config, site_config_data):
        """Test schema violations raise ConfigValidationError."""
        site_config_data["video_models"][0]["channel_id"] = "nope"
        path = write_site_config(site_config_data)

        with pytest.raises(ConfigValidationError) as exc_info:
            SiteConfigService(path).get()

        assert "unknown channel" in str(exc_info.value)

    def test_validate_reports_errors(self, write_site_config, site_config_data, tmp_path):
        """Test validate() returns messages without raising."""
        good = write_site_config(site_config_data, "good.yaml")
        site_config_data["video_channels"][0]["type"] = "unknown"
        bad = write_site_config(site_config_data, "bad.yaml")
        service = SiteConfigService(good)

        assert service.validate() == (True, [])

        is_valid, errors = service.validate(bad)
        assert is_valid is False
        assert errors

        is_valid, errors = service.validate(tmp_path / "absent.yaml")
        assert is_valid is False
        assert "does not exist" in errors[0]
