from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

Network = Literal["mainnet", "testnet"]

SUPPORTED_NETWORKS = ("mainnet", "testnet")


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _resolve_temperature(model: str, raw: str | None) -> float:
    # gpt-5 models only accept the default temperature.
    if model.startswith("gpt-5"):
        return 1.0
    return float(raw) if raw else 0.7


@dataclass(frozen=True, slots=True)
class RelaySettings:
    """Runtime configuration for the WebSocket relay."""

    host: str = "0.0.0.0"
    port: int = 8080
    network: Network = "testnet"

    llm_model: str = "gpt-5-mini"
    llm_max_tokens: int = 12000
    llm_temperature: float = 1.0
    llm_timeout: int = 60
    # Debug aid: every message starts a fresh conversation thread.
    force_clear_memory: bool = False

    log_level: str = "INFO"
    log_format: str = "color"

    service_name: str = "hedera-websocket-agent"

    @classmethod
    def load(cls) -> "RelaySettings":
        network = os.getenv("HEDERA_NETWORK", "testnet").strip().lower()
        if network not in SUPPORTED_NETWORKS:
            raise ValueError(
                f"HEDERA_NETWORK must be one of {SUPPORTED_NETWORKS}, got '{network}'."
            )

        model = os.getenv("LLM_MODEL", "gpt-5-mini").strip()
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8080")),
            network=network,  # type: ignore[arg-type]
            llm_model=model,
            llm_max_tokens=int(os.getenv("LLM_MAX_TOKENS", "12000")),
            llm_temperature=_resolve_temperature(model, os.getenv("LLM_TEMPERATURE")),
            llm_timeout=int(os.getenv("LLM_TIMEOUT", "60")),
            force_clear_memory=env_bool("FORCE_CLEAR_MEMORY"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "color"),
        )


@lru_cache(maxsize=1)
def get_settings() -> RelaySettings:
    """Memoized accessor so callers share a single settings instance."""

    return RelaySettings.load()
