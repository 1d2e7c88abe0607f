"""Configuration management for SUBSWEEP.

Loads defaults from ``subsweep.yaml`` (or an explicit path), with
environment variable overrides.  CLI flags are applied on top by
:meth:`subsweep.core.options.ScanOptions.build`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field

from subsweep.core.channel import RESULT_QUEUE_SIZE, TASK_QUEUE_SIZE

DEFAULT_CONFIG_FILE = "subsweep.yaml"
ENV_PREFIX = "SUBSWEEP__"


class GeneralConfig(BaseModel):
    """General run configuration."""

    task_count: int = 25
    output_dir: str = "."


class DNSConfig(BaseModel):
    """DNS resolver configuration."""

    # Google public DNS
    nameservers: List[str] = ["8.8.8.8", "8.8.4.4"]
    timeout: float = 5.0


class HTTPConfig(BaseModel):
    """Title/status probing configuration."""

    timeout: float = 9.0
    fetch_title: bool = True
    verify_ssl: bool = False
    user_agents: List[str] = Field(
        default_factory=lambda: [
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            "Mozilla/5.0 (X11; Linux x86_64; rv:109.0) Gecko/20100101 Firefox/121.0",
        ]
    )


class PipelineConfig(BaseModel):
    """Channel capacities and polling intervals."""

    task_queue_size: int = TASK_QUEUE_SIZE
    result_queue_size: int = RESULT_QUEUE_SIZE
    worker_poll_interval: float = 0.2
    sink_poll_interval: float = 1.0


class WildcardConfig(BaseModel):
    """Wildcard DNS pre-flight check."""

    enabled: bool = True
    probe_label: str = "thisdomainneverexist"
    random_length: int = 5


class Config(BaseModel):
    """Top-level SUBSWEEP configuration."""

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    dns: DNSConfig = Field(default_factory=DNSConfig)
    http: HTTPConfig = Field(default_factory=HTTPConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    wildcard: WildcardConfig = Field(default_factory=WildcardConfig)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from a YAML file, applying environment variable overrides.

    Args:
        config_path: Optional path to a YAML configuration file. Defaults to
                     ``subsweep.yaml`` in the current working directory.

    Returns:
        Populated :class:`Config` instance.
    """
    path = Path(config_path) if config_path else Path(DEFAULT_CONFIG_FILE)

    raw: Dict[str, Any] = {}
    if path.exists():
        with path.open("r") as fh:
            raw = yaml.safe_load(fh) or {}

    # SUBSWEEP__SECTION__KEY=value
    _apply_env_overrides(raw)

    return Config(**raw)


def _apply_env_overrides(raw: Dict[str, Any]) -> None:
    """Mutate *raw* in-place with values from environment variables.

    Environment variables follow the pattern ``SUBSWEEP__<SECTION>__<KEY>``,
    for example ``SUBSWEEP__GENERAL__TASK_COUNT=50``.  List-valued keys accept
    a comma-separated string.
    """
    for env_key, env_val in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        parts = env_key[len(ENV_PREFIX):].lower().split("__")
        if len(parts) != 2:
            continue
        section, key = parts
        field = _list_field(section, key)
        value: Any = env_val
        if field:
            value = [item.strip() for item in env_val.split(",") if item.strip()]
        raw.setdefault(section, {})[key] = value


def _list_field(section: str, key: str) -> bool:
    model = Config.model_fields.get(section)
    if model is None or model.annotation is None:
        return False
    sub_fields = getattr(model.annotation, "model_fields", {})
    sub = sub_fields.get(key)
    return sub is not None and getattr(sub.annotation, "__origin__", None) is list
