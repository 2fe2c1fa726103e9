"""Unit tests for server configuration settings model.

Tests verify the layering of appsettings JSON files, environment variables
and init arguments, and the connection string lookup used at startup.
"""

import json

import pytest

from bestregi.server.core.config import ConfigurationError, IdentityOptions, Settings, appsettings_files


def _write_json(path, data) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")


class TestConnectionStrings:
    """Test the required connection string lookup."""

    def test_missing_connection_string_raises(self):
        settings = Settings()

        with pytest.raises(ConfigurationError, match="Connection string 'BestRegiContextConnection' not found."):
            settings.require_connection_string("BestRegiContextConnection")

    def test_blank_connection_string_counts_as_missing(self):
        settings = Settings(connection_strings={"BestRegiContextConnection": "   "})

        assert settings.get_connection_string("BestRegiContextConnection") is None

    def test_lookup_ignores_case(self):
        settings = Settings(connection_strings={"bestregicontextconnection": "sqlite:///app.db"})

        assert settings.require_connection_string("BestRegiContextConnection") == "sqlite:///app.db"

    def test_read_from_appsettings_json(self, tmp_path):
        _write_json(
            tmp_path / "appsettings.json",
            {"ConnectionStrings": {"BestRegiContextConnection": "sqlite:///from-json.db"}},
        )

        settings = Settings()

        assert settings.require_connection_string("BestRegiContextConnection") == "sqlite:///from-json.db"

    def test_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("CONNECTIONSTRINGS__BestRegiContextConnection", "sqlite:///from-env.db")

        settings = Settings()

        assert settings.require_connection_string("BestRegiContextConnection") == "sqlite:///from-env.db"

    def test_environment_overrides_json(self, tmp_path, monkeypatch):
        _write_json(
            tmp_path / "appsettings.json",
            {"ConnectionStrings": {"BestRegiContextConnection": "sqlite:///from-json.db"}},
        )
        monkeypatch.setenv("CONNECTIONSTRINGS__BestRegiContextConnection", "sqlite:///from-env.db")

        settings = Settings()

        assert settings.require_connection_string("BestRegiContextConnection") == "sqlite:///from-env.db"
        assert len(settings.connection_strings) == 1

    def test_dotenv_overrides_json(self, tmp_path):
        _write_json(
            tmp_path / "appsettings.json",
            {"ConnectionStrings": {"BestRegiContextConnection": "sqlite:///from-json.db"}},
        )
        (tmp_path / ".env").write_text(
            "CONNECTIONSTRINGS__BESTREGICONTEXTCONNECTION=sqlite:///from-dotenv.db\n", encoding="utf-8"
        )

        settings = Settings()

        assert settings.require_connection_string("BestRegiContextConnection") == "sqlite:///from-dotenv.db"

    def test_names_differing_in_case_collapse_to_last(self):
        settings = Settings(
            connection_strings={
                "BestRegiContextConnection": "sqlite:///first.db",
                "bestregicontextconnection": "sqlite:///second.db",
            }
        )

        assert settings.connection_strings == {"bestregicontextconnection": "sqlite:///second.db"}


class TestAppSettingsLayering:
    """Test environment-specific appsettings files."""

    def test_environment_file_overrides_base_file(self, tmp_path, monkeypatch):
        _write_json(tmp_path / "appsettings.json", {"Hsts": {"MaxAgeDays": 30, "Preload": True}})
        _write_json(tmp_path / "appsettings.Staging.json", {"Hsts": {"MaxAgeDays": 365}})
        monkeypatch.setenv("BESTREGI_ENVIRONMENT", "Staging")

        settings = Settings()

        assert settings.environment == "Staging"
        assert settings.hsts.max_age_days == 365
        assert settings.hsts.preload is True

    def test_identity_section_uses_pascal_case_keys(self, tmp_path):
        _write_json(
            tmp_path / "appsettings.json",
            {"Identity": {"Password": {"RequiredLength": 12}, "Lockout": {"MaxFailedAccessAttempts": 3}}},
        )

        settings = Settings()

        assert settings.identity.password.required_length == 12
        assert settings.identity.lockout.max_failed_access_attempts == 3
        assert settings.identity.password.require_digit is True

    def test_appsettings_files_for_environment(self, tmp_path):
        files = appsettings_files("Staging", tmp_path)

        assert files == [tmp_path / "appsettings.json", tmp_path / "appsettings.Staging.json"]

    def test_content_root_from_environment(self, tmp_path, monkeypatch):
        content_root = tmp_path / "site"
        content_root.mkdir()
        _write_json(content_root / "appsettings.json", {"Hsts": {"MaxAgeDays": 7}})
        monkeypatch.setenv("BESTREGI_CONTENT_ROOT", str(content_root))

        settings = Settings()

        assert settings.hsts.max_age_days == 7

    def test_environment_from_dotenv_selects_file(self, tmp_path):
        (tmp_path / ".env").write_text("BESTREGI_ENVIRONMENT=Development\n", encoding="utf-8")
        _write_json(
            tmp_path / "appsettings.Development.json",
            {"ConnectionStrings": {"BestRegiContextConnection": "sqlite:///dev.db"}},
        )

        settings = Settings()

        assert settings.is_development()
        assert settings.require_connection_string("BestRegiContextConnection") == "sqlite:///dev.db"

    def test_environment_argument_selects_file(self, tmp_path):
        _write_json(tmp_path / "appsettings.Staging.json", {"Hsts": {"Preload": True}})

        settings = Settings(environment="Staging")

        assert settings.hsts.preload is True

    def test_content_root_from_dotenv(self, tmp_path):
        content_root = tmp_path / "site"
        content_root.mkdir()
        _write_json(content_root / "appsettings.json", {"Hsts": {"IncludeSubdomains": True}})
        (tmp_path / ".env").write_text(f"BESTREGI_CONTENT_ROOT={content_root}\n", encoding="utf-8")

        settings = Settings()

        assert settings.hsts.include_subdomains is True


class TestDefaults:
    def test_defaults(self):
        settings = Settings()

        assert settings.environment == "Production"
        assert settings.server_port == 8000
        assert settings.secret_key is None
        assert settings.https_redirection.https_port is None
        assert settings.hsts.excluded_hosts == ["localhost", "127.0.0.1", "[::1]"]

    @pytest.mark.parametrize("environment,expected", [("Development", True), ("development", True), ("Production", False)])
    def test_is_development(self, environment, expected):
        assert Settings(environment=environment).is_development() is expected

    def test_identity_defaults(self):
        options = IdentityOptions()

        assert options.sign_in.require_confirmed_account is False
        assert options.cookie.login_path == "/Identity/Account/Login"
        assert options.cookie.access_denied_path == "/Identity/Account/AccessDenied"
        assert options.cookie.expire_minutes == 14 * 24 * 60
        assert options.lockout.max_failed_access_attempts == 5
