from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()


def load_env() -> None:
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    log_dir: str = "logs"
    tick_interval_sec: int = 60
    snooze_minutes: int = 60
    toast_timeout_sec: int = 10
    due_soon_minutes: int = 60
    dismiss_cooldown_minutes: int = 60
    presentation: str = "panel"
    alert_sound: str | None = None
    critical_sound: str | None = None


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return max(int(raw), 1)
    except ValueError:
        return default


def load_settings() -> Settings:
    presentation = os.getenv("NOTIFICATION_PRESENTATION", "panel").strip().lower()
    if presentation not in ("panel", "toast"):
        presentation = "panel"
    return Settings(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_dir=os.getenv("LOG_DIR", "logs"),
        tick_interval_sec=_int_env("REMINDER_TICK_SEC", 60),
        snooze_minutes=_int_env("SNOOZE_MIN", 60),
        toast_timeout_sec=_int_env("TOAST_TIMEOUT_SEC", 10),
        due_soon_minutes=_int_env("DUE_SOON_MIN", 60),
        dismiss_cooldown_minutes=_int_env("DISMISS_COOLDOWN_MIN", 60),
        presentation=presentation,
        alert_sound=os.getenv("ALERT_SOUND_PATH", "").strip() or None,
        critical_sound=os.getenv("CRITICAL_SOUND_PATH", "").strip() or None,
    )


load_env()

SETTINGS = load_settings()
