from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "./configs/config.yaml"

DEFAULT_SYSTEM_INSTRUCTION = (
    "You are a specialized financial systems analyst AI. Be concise, professional, and data-driven."
)


class ChaosBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class AccessConfig(ChaosBaseModel):
    current_user: str = Field(default="sysadmin-001")
    allowed_systems: List[str] = Field(
        default_factory=lambda: ["financial-market-stability-v1", "supply-chain-resilience-v1"]
    )

    @field_validator("allowed_systems")
    @classmethod
    def drop_duplicates(cls, value: List[str]) -> List[str]:
        seen: set[str] = set()
        ordered: List[str] = []
        for item in value:
            if item and item not in seen:
                seen.add(item)
                ordered.append(item)
        return ordered


class GatewayConfig(ChaosBaseModel):
    list_latency_seconds: float = Field(default=0.6, ge=0.0)
    analysis_latency_seconds: float = Field(default=0.8, ge=0.0)
    update_latency_seconds: float = Field(default=0.3, ge=0.0)
    fail_on: List[str] = Field(default_factory=list)

    @field_validator("fail_on")
    @classmethod
    def validate_fail_on(cls, value: List[str]) -> List[str]:
        allowed = {"list_systems", "get_system", "identify_leverage_points", "update_parameter", "start_simulation_run"}
        unknown = [item for item in value if item not in allowed]
        if unknown:
            raise ValueError(f"gateway.fail_on entries must be one of {', '.join(sorted(allowed))}")
        return value


class LLMCloudConfig(ChaosBaseModel):
    provider: str = Field(default="openai")
    model: str = Field(default="gpt-4o-mini")
    api_key_env: str = Field(default="OPENAI_API_KEY")
    retry_attempts: int = Field(default=3, ge=1, le=10)
    retry_initial_delay: float = Field(default=1.0, ge=0.1)
    retry_max_delay: float = Field(default=30.0, ge=1.0)


class LLMConfig(ChaosBaseModel):
    mode: str = Field(default="offline")
    display_model: str = Field(default="Gemini")
    system_instruction: str = Field(default=DEFAULT_SYSTEM_INSTRUCTION)
    timeout_seconds: int = Field(default=30, ge=1)
    offline_delay_seconds: float = Field(default=1.0, ge=0.0)
    cloud: Optional[LLMCloudConfig] = None

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, value: str) -> str:
        allowed = {"offline", "cloud"}
        if value not in allowed:
            raise ValueError(f"llm.mode must be one of {', '.join(sorted(allowed))}")
        return value

    @field_validator("display_model")
    @classmethod
    def validate_display_model(cls, value: str) -> str:
        allowed = {"Gemini", "ChatGPT", "Claude", "System"}
        if value not in allowed:
            raise ValueError(f"llm.display_model must be one of {', '.join(sorted(allowed))}")
        return value


class NotificationConfig(ChaosBaseModel):
    critical_alerts: bool = Field(default=True)
    simulation_updates: bool = Field(default=True)


class PreferencesConfig(ChaosBaseModel):
    dark_mode: bool = Field(default=False)
    refresh_interval_seconds: int = Field(default=60, ge=1)
    notification_settings: NotificationConfig = Field(default_factory=NotificationConfig)


class ReportingConfig(ChaosBaseModel):
    intervention_log: Optional[str] = Field(default=None)
    retry_attempts: int = Field(default=3, ge=1)


class ChaosConfig(ChaosBaseModel):
    env: str = Field(default="dev")
    log_level: str = Field(default="WARNING")
    access: AccessConfig = Field(default_factory=AccessConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    preferences: PreferencesConfig = Field(default_factory=PreferencesConfig)
    reporting: ReportingConfig = Field(default_factory=ReportingConfig)

    @field_validator("env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        if not value:
            raise ValueError("env must be a non-empty string")
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = (value or "").upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("log_level must be a standard logging level name")
        return level

    def dump(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> ChaosConfig:
    """Read a YAML config file; a missing file yields the defaults."""
    cfg_path = Path(path)
    if not cfg_path.exists():
        logger.debug("Config %s not found; using defaults", cfg_path)
        return ChaosConfig()
    with cfg_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {cfg_path} must contain a mapping at the top level")
    return ChaosConfig.model_validate(raw)
