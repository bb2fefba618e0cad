# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
n8n MCP Configuration.
YAML for tunables. Env vars for secrets and deployment overrides.
"""

import os
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .exceptions import N8nConfigError

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


@dataclass(frozen=True)
class N8nConfig:
    """
    Immutable server configuration.
    Shared read-only by every tool call.
    """

    base_url: str
    api_key: str
    timeout: float = 30.0
    port: int = 7010
    host: str = "0.0.0.0"
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/api/v1"


def load_config(path: Optional[Path] = None) -> N8nConfig:
    """
    Load configuration from YAML and environment.

    Args:
        path: YAML config path (defaults to config.yaml next to this module)

    Returns:
        N8nConfig instance

    Raises:
        N8nConfigError: If N8N_URL or N8N_API_KEY is missing, or YAML is invalid
    """
    load_dotenv()

    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    y = {}
    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                y = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise N8nConfigError(f"Invalid YAML in config file {config_path}: {e}")

    base_url = os.getenv("N8N_URL", "")
    api_key = os.getenv("N8N_API_KEY", "")

    if not base_url:
        raise N8nConfigError("N8N_URL environment variable is required")
    if not api_key:
        raise N8nConfigError("N8N_API_KEY environment variable is required")

    server = y.get("server") or {}
    http = y.get("http") or {}
    logging_cfg = y.get("logging") or {}

    return N8nConfig(
        base_url=base_url.rstrip("/"),
        api_key=api_key,
        timeout=float(http.get("timeout") or 30.0),
        port=int(os.getenv("N8N_MCP_PORT") or server.get("port") or 7010),
        host=server.get("host") or "0.0.0.0",
        log_level=os.getenv("LOG_LEVEL") or logging_cfg.get("level") or "INFO",
        log_format=logging_cfg.get("format") or "json",
    )
