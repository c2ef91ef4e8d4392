from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml

from grocery_pricing.app.models.config import PricingConfig

SUPPORTED_SCHEMA_VERSIONS = {1}


def load_pricing_config(path: str | Path) -> PricingConfig:
    data: Dict[str, Any]
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    config = PricingConfig.model_validate(data)
    if config.schema_version not in SUPPORTED_SCHEMA_VERSIONS:
        raise ValueError(f"Unsupported schema_version {config.schema_version}")
    return config


def load_pricing_config_from_env() -> PricingConfig:
    path = os.getenv("PRICING_CONFIG_PATH")
    if not path:
        return PricingConfig()
    return load_pricing_config(path)
