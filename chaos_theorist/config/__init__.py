from .schema import (
    ChaosConfig,
    AccessConfig,
    GatewayConfig,
    LLMConfig,
    LLMCloudConfig,
    PreferencesConfig,
    ReportingConfig,
    load_config,
)

__all__ = [
    "ChaosConfig",
    "AccessConfig",
    "GatewayConfig",
    "LLMConfig",
    "LLMCloudConfig",
    "PreferencesConfig",
    "ReportingConfig",
    "load_config",
]
