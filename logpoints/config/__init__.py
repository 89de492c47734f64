"""Configuration management for the log points debug adapter."""

from logpoints.config.adapter_config import AdapterConfig
from logpoints.config.adapter_config import AttachConfig

__all__ = [
    "AdapterConfig",
    "AttachConfig",
]
