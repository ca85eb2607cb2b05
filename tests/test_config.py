"""
Tests for configuration loading.

Tests verify:
- Defaults without a config file
- YAML sections override defaults
- UNIVOUCHER_* environment variables override YAML
- Signing key normalization and redaction
"""

from pathlib import Path

import pytest

from univoucher_mcp.server.config import (
    PROJECT_ROOT,
    APIConfig,
    Config,
    ServerConfig,
    load_config,
    normalize_credential,
)

KEY_HEX = "ab" * 32


def write_config(tmp_path: Path, text: str) -> Path:
    config_path = tmp_path / "univoucher_config.yml"
    config_path.write_text(text, encoding="utf-8")
    return config_path


class TestDefaults:
    """Test default configuration."""

    def test_defaults_without_file(self, tmp_path: Path) -> None:
        """Test a missing config file falls back to defaults."""
        config = load_config(tmp_path / "absent.yml")

        assert config.api.base_url == "https://api.univoucher.com/v1"
        assert config.api.timeout_seconds == 30.0  # noqa: PLR2004
        assert config.api.max_retries == 1
        assert config.server.log_level == "INFO"
        assert config.signing_key is None
        assert config.to_dict()["config_path"] is None

    def test_default_file_in_working_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test ./univoucher_config.yml is picked up when no path is given."""
        write_config(tmp_path, "server:\n  log_level: debug\n")
        monkeypatch.chdir(tmp_path)

        assert load_config().server.log_level == "DEBUG"


class TestYamlAndEnvironment:
    """Test override precedence."""

    def test_yaml_sections(self, tmp_path: Path) -> None:
        """Test YAML values replace defaults per section."""
        docs_dir = tmp_path / "docs"
        config_path = write_config(
            tmp_path,
            f"""
api:
  base_url: "https://staging.test/v1/"
  max_retries: 0
docs:
  docs_path: "{docs_dir}"
server:
  log_format: json
""",
        )

        config = load_config(config_path)

        assert config.api.base_url == "https://staging.test/v1"
        assert config.api.max_retries == 0
        assert config.docs.docs_path == str(docs_dir.resolve())
        assert config.server.log_format == "json"
        assert config.to_dict()["config_path"] == str(config_path)

    def test_environment_beats_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test environment variables win over the file."""
        config_path = write_config(tmp_path, "api:\n  timeout_seconds: 10\n")
        monkeypatch.setenv("UNIVOUCHER_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("UNIVOUCHER_API_BASE_URL", "http://localhost:8080/v1")
        monkeypatch.setenv("UNIVOUCHER_LOG_LEVEL", "warning")

        config = load_config(config_path)

        assert config.api.timeout_seconds == 2.5  # noqa: PLR2004
        assert config.api.base_url == "http://localhost:8080/v1"
        assert config.server.log_level == "WARNING"

    def test_unknown_yaml_key_is_ignored_with_warning(self, tmp_path: Path) -> None:
        """Test a bad file does not prevent startup."""
        config_path = write_config(tmp_path, "api:\n  colour: blue\n")

        config = load_config(config_path)

        assert config.api == APIConfig()

    def test_invalid_environment_value_raises(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test validation errors from the environment propagate."""
        monkeypatch.setenv("UNIVOUCHER_MAX_RETRIES", "9")

        with pytest.raises(ValueError, match="max_retries"):
            load_config(tmp_path / "absent.yml")


class TestSigningKey:
    """Test signing key handling."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (f"0x{KEY_HEX}", KEY_HEX),
            (f"  0X{KEY_HEX}\n", KEY_HEX),
            (KEY_HEX, KEY_HEX),
            ("", None),
            ("0x", None),
            (None, None),
        ],
    )
    def test_normalize_credential(self, raw: str | None, expected: str | None) -> None:
        """Test the 0x prefix and whitespace are stripped."""
        assert normalize_credential(raw) == expected

    def test_key_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test the key is read from UNIVOUCHER_PRIVATE_KEY only."""
        config_path = write_config(tmp_path, f"signing_key: {KEY_HEX}\n")
        assert load_config(config_path).signing_key is None

        monkeypatch.setenv("UNIVOUCHER_PRIVATE_KEY", f"0x{KEY_HEX}")
        config = load_config(config_path)

        assert config.signing_key == KEY_HEX
        assert config.has_signing_key

    def test_key_is_redacted(self) -> None:
        """Test the key never appears in repr or to_dict."""
        config = Config(signing_key=f"0x{KEY_HEX}")

        assert KEY_HEX not in repr(config)
        assert KEY_HEX not in str(config.to_dict())
        assert config.to_dict()["signing_key_configured"] is True


class TestValidation:
    """Test dataclass validation."""

    def test_rejects_non_http_base_url(self) -> None:
        """Test base_url must be http(s)."""
        with pytest.raises(ValueError, match="base_url"):
            APIConfig(base_url="ftp://example.com")

    def test_rejects_bad_log_format(self) -> None:
        """Test log_format must be text or json."""
        with pytest.raises(ValueError, match="log_format"):
            ServerConfig(log_format="xml")


def test_docs_path_env_overrides_source_tree_default(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test an installed server can be pointed at a docs tree outside the package."""
    monkeypatch.chdir(tmp_path)
    assert load_config().docs.docs_path == str(PROJECT_ROOT / "docs")

    monkeypatch.setenv("UNIVOUCHER_DOCS_PATH", str(tmp_path / "docs"))

    assert load_config().docs.docs_path == str((tmp_path / "docs").resolve())
