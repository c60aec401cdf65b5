from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from automation.config import BookingSettings, _safe_int, load_booking_settings

PAYLOAD_SHAPES = ("flat", "nested")


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Webhook server settings; built once at startup and never mutated."""

    host: str = "0.0.0.0"
    port: int = 3000
    max_body_bytes: int = 1_000_000
    payload_shape: str = "flat"
    log_level: str = "INFO"
    booking: BookingSettings = field(default_factory=BookingSettings)


def _validate_config(config: ServerConfig) -> None:
    if not 0 < config.port < 65536:
        raise ValueError(f"PORT must be between 1 and 65535, got {config.port}")
    if config.max_body_bytes < 1:
        raise ValueError(f"MAX_BODY_BYTES must be >= 1, got {config.max_body_bytes}")
    if config.payload_shape not in PAYLOAD_SHAPES:
        raise ValueError(
            f"WEBHOOK_PAYLOAD_SHAPE must be one of {', '.join(PAYLOAD_SHAPES)}, "
            f"got {config.payload_shape!r}"
        )


def load_config(env: Optional[Mapping[str, str]] = None) -> ServerConfig:
    """Load and validate the server configuration from ``env`` (``os.environ`` by default)."""
    if env is None:
        env = os.environ
    config = ServerConfig(
        host=env.get("HOST", "0.0.0.0"),
        port=_safe_int(env, "PORT", "3000"),
        max_body_bytes=_safe_int(env, "MAX_BODY_BYTES", "1000000"),
        payload_shape=env.get("WEBHOOK_PAYLOAD_SHAPE", "flat").strip().lower(),
        log_level=env.get("LOG_LEVEL", "INFO"),
        booking=load_booking_settings(env),
    )
    _validate_config(config)
    return config
