"""TOML configuration loader for pantry-watch."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .channels.emailjs import EMAILJS_API_URL


@dataclass
class DatabaseConfig:
    path: str = "~/.config/pantry-watch/pantry.db"


@dataclass
class EngineConfig:
    soon_days: int = 7
    refresh_interval: int = 60
    rollover_cron: str = "0 0 * * *"


@dataclass
class EmailJSConfig:
    service_id: str = ""
    template_id: str = ""
    user_id: str = ""
    access_token: str = ""
    endpoint: str = EMAILJS_API_URL
    timeout: float = 30.0

    @property
    def configured(self) -> bool:
        return bool(self.service_id and self.template_id and self.user_id)


@dataclass
class NotifyConfig:
    local: bool = True
    email: bool = False
    recipients: list[str] = field(default_factory=list)
    emailjs: EmailJSConfig = field(default_factory=EmailJSConfig)


@dataclass
class PantryConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    notify: NotifyConfig = field(default_factory=NotifyConfig)
    log_level: str = "INFO"


def load_config(path: str | Path | None = None) -> PantryConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    EmailJS credentials can be overridden via environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    db = raw.get("database", {})
    eng = raw.get("engine", {})
    ntf = raw.get("notify", {})
    ejs = ntf.get("emailjs", {})

    soon_days = eng.get("soon_days", 7)
    if soon_days < 0:
        raise ValueError(f"engine.soon_days must be >= 0, got {soon_days}")
    interval = eng.get("refresh_interval", 60)
    if interval <= 0:
        raise ValueError(f"engine.refresh_interval must be > 0, got {interval}")

    # Resolve EmailJS credentials: config file → environment variable
    def _secret(key: str, env: str) -> str:
        return ejs.get(key, "") or os.environ.get(env, "")

    return PantryConfig(
        database=DatabaseConfig(
            path=db.get("path", "~/.config/pantry-watch/pantry.db"),
        ),
        engine=EngineConfig(
            soon_days=soon_days,
            refresh_interval=interval,
            rollover_cron=eng.get("rollover_cron", "0 0 * * *"),
        ),
        notify=NotifyConfig(
            local=ntf.get("local", True),
            email=ntf.get("email", False),
            recipients=list(ntf.get("recipients", [])),
            emailjs=EmailJSConfig(
                service_id=_secret("service_id", "EMAILJS_SERVICE_ID"),
                template_id=_secret("template_id", "EMAILJS_TEMPLATE_ID"),
                user_id=_secret("user_id", "EMAILJS_USER_ID"),
                access_token=_secret("access_token", "EMAILJS_ACCESS_TOKEN"),
                endpoint=ejs.get("endpoint", EMAILJS_API_URL),
                timeout=ejs.get("timeout", 30.0),
            ),
        ),
        log_level=raw.get("log_level", "INFO"),
    )
