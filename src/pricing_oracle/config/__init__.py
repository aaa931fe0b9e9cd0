"""
Configuration Module

Provides centralized configuration management using Pydantic Settings
for the environment and a validated YAML file for the unit list.
"""

from pricing_oracle.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
