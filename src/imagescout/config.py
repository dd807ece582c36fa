from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

_ENV_PREFIX = "IMAGESCOUT_"


@dataclass(frozen=True)
class Settings:
    docker_binary: str = "docker"
    timeout_s: float | None = None
    log_level: str = "WARNING"


def _parse_timeout(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(
            f"{_ENV_PREFIX}TIMEOUT_S must be a number, got {raw!r}"
        ) from None
    if value <= 0:
        raise ValueError(f"{_ENV_PREFIX}TIMEOUT_S must be > 0, got {raw!r}")
    return value


def _parse_log_level(raw: str | None) -> str:
    name = (raw or "").strip().upper()
    if not name:
        return "WARNING"
    if not isinstance(logging.getLevelName(name), int):
        raise ValueError(f"{_ENV_PREFIX}LOG_LEVEL is not a logging level, got {raw!r}")
    return name


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build settings from the process environment.

    A `.env` file in the working directory is loaded first; variables already
    set in the environment win. Passing `env` skips both and reads only the
    given mapping.
    """
    if env is None:
        _ = load_dotenv(find_dotenv(usecwd=True), override=False)
        env = os.environ

    docker_binary = (env.get(f"{_ENV_PREFIX}DOCKER") or "").strip() or "docker"
    return Settings(
        docker_binary=docker_binary,
        timeout_s=_parse_timeout(env.get(f"{_ENV_PREFIX}TIMEOUT_S")),
        log_level=_parse_log_level(env.get(f"{_ENV_PREFIX}LOG_LEVEL")),
    )
