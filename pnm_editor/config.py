"""Настройки приложения из переменных окружения."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass
class Config:
    """Application configuration.

    Все значения можно переопределить переменными окружения `PNM_EDITOR_*`;
    флаги командной строки имеют приоритет над окружением.
    """
    log_level: str = "WARNING"
    log_file: Optional[str] = None
    histogram_marker: str = "*"
    appearance_mode: str = "system"  # "system" | "light" | "dark"
    color_theme: str = "blue"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        env = os.environ if environ is None else environ
        marker = env.get("PNM_EDITOR_HISTOGRAM_MARKER", "*")
        return cls(
            log_level=env.get("PNM_EDITOR_LOG_LEVEL", "WARNING").upper(),
            log_file=env.get("PNM_EDITOR_LOG_FILE") or None,
            # ровно один символ, иначе ширина строки не равна числу звёзд
            histogram_marker=marker[:1] or "*",
            appearance_mode=env.get("PNM_EDITOR_APPEARANCE", "system"),
            color_theme=env.get("PNM_EDITOR_THEME", "blue"),
        )
