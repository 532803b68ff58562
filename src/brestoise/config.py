"""Application settings loaded once from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default)


@dataclass(frozen=True)
class GitHubConfig:
    """Credentials for the repository used as the content store."""

    repo: str = field(default_factory=lambda: _env("GITHUB_REPO").strip())
    token: str = field(default_factory=lambda: _env("GITHUB_TOKEN").strip())
    branch: str = field(default_factory=lambda: _env("PUBLISH_BRANCH").strip() or "main")

    @property
    def is_configured(self) -> bool:
        return bool(self.repo and self.token)

    @property
    def missing(self) -> list[str]:
        """Names of the environment variables that still need a value."""
        missing = []
        if not self.repo:
            missing.append("GITHUB_REPO")
        if not self.token:
            missing.append("GITHUB_TOKEN")
        return missing


@dataclass(frozen=True)
class AuthConfig:
    publish_token: str = field(default_factory=lambda: _env("PUBLISH_TOKEN").strip())


@dataclass(frozen=True)
class EmailConfig:
    """Resend API credentials and addresses."""

    api_key: str = field(default_factory=lambda: _env("RESEND_API_KEY"))
    from_address: str = field(
        default_factory=lambda: _env("RESEND_FROM", "À la Brestoise <no-reply@example.com>")
    )
    owner_address: str = field(default_factory=lambda: _env("OWNER_EMAIL"))
    api_url: str = field(default_factory=lambda: _env("RESEND_API_URL", "https://api.resend.com"))

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.owner_address)


@dataclass(frozen=True)
class WebhookConfig:
    lead_url: str = field(default_factory=lambda: _env("LEAD_WEBHOOK_URL"))
    deploy_hook_url: str = field(default_factory=lambda: _env("VERCEL_DEPLOY_HOOK_URL"))


@dataclass(frozen=True)
class AppConfig:
    env: str = field(default_factory=lambda: _env("APP_ENV", "development"))
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: _env("LOG_FILE"))
    content_root: str = field(default_factory=lambda: _env("CONTENT_ROOT", "."))
    site_url: str = field(
        default_factory=lambda: _env("SITE_URL", "https://a-la-brestoise.vercel.app")
    )
    http_timeout: float = field(
        default_factory=lambda: float(_env("HTTP_TIMEOUT_SECONDS", "10"))
    )

    @property
    def is_development(self) -> bool:
        return self.env == "development"

    @property
    def include_error_details(self) -> bool:
        """Error details are echoed to callers everywhere except production."""
        return self.env != "production"


@dataclass(frozen=True)
class Settings:
    github: GitHubConfig = field(default_factory=GitHubConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    email: EmailConfig = field(default_factory=EmailConfig)
    webhooks: WebhookConfig = field(default_factory=WebhookConfig)
    app: AppConfig = field(default_factory=AppConfig)


def load_settings() -> Settings:
    """Load ``.env`` (if present) and build the settings tree."""
    load_dotenv()
    return Settings()
