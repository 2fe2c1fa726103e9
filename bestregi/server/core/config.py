"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
Values are layered, lowest priority first:

1. ``appsettings.json`` in the content root
2. ``appsettings.{Environment}.json`` in the content root
3. the ``.env`` file
4. environment variables (``__`` separates nested keys, e.g.
   ``CONNECTIONSTRINGS__BestRegiContextConnection``)
5. keyword arguments passed to ``Settings(...)``

Section and option names are matched case-insensitively, so the JSON files can
use the familiar ``ConnectionStrings`` / ``Identity`` / ``Hsts`` casing.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_pascal
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from . import constant


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or invalid at startup."""


# =====================================================================
# Option Models
# =====================================================================


class _OptionsModel(BaseModel):
    """Options section accepting both PascalCase (JSON) and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, extra="ignore")


class PasswordOptions(_OptionsModel):
    """Password strength requirements."""

    required_length: int = Field(default=6, ge=1, description="Minimum password length")
    required_unique_chars: int = Field(default=1, ge=1, description="Minimum number of distinct characters")
    require_digit: bool = Field(default=True, description="Require at least one digit")
    require_lowercase: bool = Field(default=True, description="Require at least one lowercase letter")
    require_uppercase: bool = Field(default=True, description="Require at least one uppercase letter")
    require_non_alphanumeric: bool = Field(default=True, description="Require at least one symbol")


class LockoutOptions(_OptionsModel):
    """Account lockout after repeated failed sign-ins."""

    allowed_for_new_users: bool = Field(default=True, description="Enable lockout for newly created users")
    max_failed_access_attempts: int = Field(default=5, ge=1, description="Failures before the account locks")
    default_lockout_minutes: int = Field(default=5, ge=1, description="Lockout duration in minutes")


class SignInOptions(_OptionsModel):
    """Preconditions a user must meet before sign-in is allowed."""

    require_confirmed_account: bool = Field(default=False, description="Require a confirmed account")
    require_confirmed_email: bool = Field(default=False, description="Require a confirmed email address")


class UserOptions(_OptionsModel):
    """User name and email rules."""

    require_unique_email: bool = Field(default=True, description="Reject registrations reusing an email")
    allowed_user_name_characters: str = Field(
        default="abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-._@+",
        description="Characters permitted in user names",
    )


class CookieOptions(_OptionsModel):
    """Authentication cookie settings."""

    name: str = Field(default=".BestRegi.Identity", description="Cookie name")
    login_path: str = Field(default="/Identity/Account/Login", description="Where anonymous users are sent")
    logout_path: str = Field(default="/Identity/Account/Logout", description="Sign-out page")
    access_denied_path: str = Field(
        default="/Identity/Account/AccessDenied", description="Where forbidden users are sent"
    )
    return_url_parameter: str = Field(default="ReturnUrl", description="Query parameter carrying the return URL")
    expire_minutes: int = Field(default=14 * 24 * 60, ge=1, description="Ticket lifetime in minutes")
    secure: Optional[bool] = Field(default=None, description="Force the Secure flag; None follows the request")


class TokenOptions(_OptionsModel):
    """Lifetimes of tokens issued by the user manager."""

    email_confirmation_lifespan_hours: int = Field(default=24, ge=1, description="Confirmation link lifetime")


class IdentityOptions(_OptionsModel):
    """Identity subsystem configuration."""

    password: PasswordOptions = Field(default_factory=PasswordOptions)
    lockout: LockoutOptions = Field(default_factory=LockoutOptions)
    sign_in: SignInOptions = Field(default_factory=SignInOptions)
    user: UserOptions = Field(default_factory=UserOptions)
    cookie: CookieOptions = Field(default_factory=CookieOptions)
    tokens: TokenOptions = Field(default_factory=TokenOptions)


class HstsOptions(_OptionsModel):
    """Strict-Transport-Security header settings."""

    max_age_days: int = Field(default=30, ge=0, description="max-age directive in days")
    include_subdomains: bool = Field(default=False, description="Emit includeSubDomains")
    preload: bool = Field(default=False, description="Emit preload")
    excluded_hosts: List[str] = Field(
        default_factory=lambda: ["localhost", "127.0.0.1", "[::1]"],
        description="Hosts never sent the header",
    )


class HttpsRedirectionOptions(_OptionsModel):
    """HTTP to HTTPS redirect settings."""

    https_port: Optional[int] = Field(default=None, description="Port of the HTTPS endpoint to redirect to")
    redirect_status_code: int = Field(default=307, description="Status code used for the redirect")


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    ``connection_strings`` is a plain mapping; use ``get_connection_string``
    or ``require_connection_string`` to read it, both of which ignore case.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    # =====================================================================
    # Hosting
    # =====================================================================
    environment: str = Field(
        default="Production",
        description="Hosting environment name (Development, Staging, Production)",
        alias="BESTREGI_ENVIRONMENT",
    )
    content_root: Path = Field(
        default=Path("."),
        description="Directory holding the appsettings JSON files",
        alias="BESTREGI_CONTENT_ROOT",
    )
    server_host: str = Field(
        default="0.0.0.0",
        description="Host address the server binds to",
        alias="BESTREGI_SERVER_HOST",
    )
    server_port: int = Field(
        default=8000,
        description="Port the server binds to",
        alias="BESTREGI_SERVER_PORT",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="BESTREGI_LOG_LEVEL",
    )
    secret_key: Optional[str] = Field(
        default=None,
        description="Key signing authentication cookies and tokens; generated per process when unset",
        alias="BESTREGI_SECRET_KEY",
    )
    web_root: Path = Field(
        default=constant.WEB_ROOT,
        description="Directory served by the static files middleware",
        alias="BESTREGI_WEB_ROOT",
    )

    # =====================================================================
    # Sections
    # =====================================================================
    connection_strings: Dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("ConnectionStrings", "connection_strings"),
        description="Named database connection strings",
    )
    identity: IdentityOptions = Field(
        default_factory=IdentityOptions,
        validation_alias=AliasChoices("Identity", "identity"),
    )
    hsts: HstsOptions = Field(
        default_factory=HstsOptions,
        validation_alias=AliasChoices("Hsts", "hsts"),
    )
    https_redirection: HttpsRedirectionOptions = Field(
        default_factory=HttpsRedirectionOptions,
        validation_alias=AliasChoices("HttpsRedirection", "https_redirection"),
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Insert the appsettings JSON files below the dotenv and environment sources.

        The environment and content root that pick the files are resolved
        from the higher-priority sources first. Each file is its own source
        so that sections are merged key by key.
        """
        prior = (init_settings, env_settings, dotenv_settings)
        environment = _resolve_value(prior, "environment", "BESTREGI_ENVIRONMENT") or "Production"
        content_root = _resolve_value(prior, "content_root", "BESTREGI_CONTENT_ROOT") or "."
        json_sources = tuple(
            JsonConfigSettingsSource(settings_cls, json_file=path)
            for path in reversed(appsettings_files(environment, content_root))
        )
        return (init_settings, env_settings, dotenv_settings, *json_sources, file_secret_settings)

    @field_validator("connection_strings", mode="before")
    @classmethod
    def fold_connection_string_names(cls, value: Any) -> Any:
        """Collapse names differing only in case; the later (higher-priority) entry wins."""
        if not isinstance(value, dict):
            return value
        folded: Dict[str, Tuple[str, Any]] = {}
        for name, connection_string in value.items():
            folded[str(name).lower()] = (name, connection_string)
        return dict(folded.values())

    def is_development(self) -> bool:
        """Whether the hosting environment is Development."""
        return self.environment.strip().lower() == constant.DEVELOPMENT_ENVIRONMENT.lower()

    def get_connection_string(self, name: str) -> Optional[str]:
        """Look up a connection string by name, ignoring case.

        Blank values count as missing.
        """
        wanted = name.lower()
        for key, value in self.connection_strings.items():
            if key.lower() == wanted and value and value.strip():
                return value.strip()
        return None

    def require_connection_string(self, name: str) -> str:
        """Return the named connection string or raise ``ConfigurationError``."""
        value = self.get_connection_string(name)
        if value is None:
            raise ConfigurationError(f"Connection string '{name}' not found.")
        return value


def _resolve_value(sources: Tuple[PydanticBaseSettingsSource, ...], *names: str) -> Optional[str]:
    wanted = {name.lower() for name in names}
    for source in sources:
        for key, value in source().items():
            if key.lower() in wanted and value not in (None, ""):
                return str(value)
    return None


def appsettings_files(environment: str = "Production", content_root: str | Path = ".") -> List[Path]:
    """JSON configuration files in load order for ``environment``.

    The content root defaults to the working directory and can be moved with
    ``BESTREGI_CONTENT_ROOT``. Missing files are skipped by the JSON source.
    """
    root = Path(content_root)
    return [
        root / "appsettings.json",
        root / f"appsettings.{environment}.json",
    ]


def get_settings() -> Settings:
    """Load settings from every configured source."""
    return Settings()
