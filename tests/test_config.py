"""
Smoke tests for configuration loading and validation.
"""

from main import load_config, validate_config
from models.config import Config


class TestValidateConfig:
    """Tests for validate_config function."""

    def test_valid_config_passes(self, valid_config):
        """A complete valid config passes validation."""
        is_valid, error = validate_config(valid_config)

        assert is_valid is True
        assert error is None

    def test_minimal_config_passes(self):
        """Only log settings are required; every section has defaults."""
        is_valid, error = validate_config({"log_path": "x.log", "log_level": "DEBUG"})

        assert is_valid is True

    def test_missing_log_path(self, valid_config):
        del valid_config["log_path"]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "log_path" in error.lower()

    def test_invalid_log_level(self, valid_config):
        valid_config["log_level"] = "VERBOSE"

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "log_level" in error.lower()

    def test_invalid_port(self, valid_config):
        valid_config["server"]["port"] = 70000

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "port" in error.lower()

    def test_non_positive_retention(self, valid_config):
        valid_config["signaling"]["retention_hours"] = 0

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "retention_hours" in error

    def test_string_device_id_valid(self, valid_config):
        """String device_id (stream URL or file path) is valid."""
        valid_config["camera"]["device_id"] = "rtsp://192.168.1.1/stream"

        is_valid, error = validate_config(valid_config)

        assert is_valid is True

    def test_negative_device_id(self, valid_config):
        valid_config["camera"]["device_id"] = -1

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "device_id" in error.lower()

    def test_invalid_resolution(self, valid_config):
        valid_config["camera"]["resolution"] = [1920]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "resolution" in error.lower()

    def test_empty_model(self, valid_config):
        valid_config["detection"]["model"] = ""

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "model" in error.lower()

    def test_confidence_threshold_range(self, valid_config):
        valid_config["tracking"]["confidence_threshold"] = 1.5

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "confidence_threshold" in error

    def test_cooldown_must_be_positive(self, valid_config):
        valid_config["tracking"]["cooldown_s"] = 0

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "cooldown_s" in error

    def test_grid_px_must_be_int(self, valid_config):
        valid_config["tracking"]["grid_px"] = 2.5

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "grid_px" in error

    def test_bool_is_not_a_number(self, valid_config):
        valid_config["signaling"]["sweep_interval_s"] = True

        is_valid, error = validate_config(valid_config)

        assert is_valid is False

    def test_max_consecutive_failures(self, valid_config):
        valid_config["pipeline"]["max_consecutive_failures"] = 0

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "max_consecutive_failures" in error


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_default_yaml(self, temp_config_dir):
        """Config loads from default.yaml when only it exists."""
        config = load_config(str(temp_config_dir / "config.yaml"))

        assert config["server"]["port"] == 5000
        assert config["tracking"]["tracked_class"] == "person"

    def test_local_overrides_merge(self, temp_config_dir):
        """config.yaml overrides individual keys, keeping the rest."""
        (temp_config_dir / "config.yaml").write_text("server:\n  port: 8080\n")

        config = load_config(str(temp_config_dir / "config.yaml"))

        assert config["server"]["port"] == 8080
        assert config["server"]["host"] == "127.0.0.1"

    def test_explicit_path_applied_last(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("tracking:\n  cooldown_s: 3.0\n")
        explicit = temp_config_dir / "site.yaml"
        explicit.write_text("tracking:\n  cooldown_s: 8.0\nlog_level: DEBUG\n")

        config = load_config(str(explicit))

        assert config["tracking"]["cooldown_s"] == 8.0
        assert config["tracking"]["confidence_threshold"] == 0.5
        assert config["log_level"] == "DEBUG"

    def test_loaded_config_validates(self, temp_config_dir):
        config = load_config(str(temp_config_dir / "config.yaml"))

        assert validate_config(config) == (True, None)


class TestTypedConfig:
    def test_from_dict_defaults(self):
        cfg = Config.from_dict({})

        assert cfg.server.port == 5000
        assert cfg.signaling.retention_s == 24 * 3600
        assert cfg.signaling.sweep_interval_s == 3600
        assert cfg.tracking.cooldown_s == 5.0
        assert cfg.tracking.confidence_threshold == 0.5

    def test_round_trip_sections(self, valid_config):
        cfg = Config.from_dict(valid_config)
        d = cfg.to_dict()

        assert d["tracking"] == valid_config["tracking"]
        assert d["server"] == valid_config["server"]
        assert d["log_path"] == "logs/test.log"
