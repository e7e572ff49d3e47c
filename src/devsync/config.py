"""Application configuration: settings schema and devsync.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "devsync.yaml"
API_KEY_ENV = "DEVTO_APIKEY"


class Settings(BaseModel):
    api_key:         str   = Field(default="", description="dev.to API key")
    api_url:         str   = Field(default="https://dev.to", description="Base URL of the Forem instance")
    root_dir:        str   = Field(default=".", description="Root directory of the static site")
    per_page:        int   = Field(default=1000, ge=1, le=1000, description="Page size when listing articles")
    retry_delay:     float = Field(default=1.0, ge=0, description="Seconds to wait after a 429 before retrying")
    timeout:         float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    parser_config:   str   = Field(default="gfm-like", description="MarkdownIt parser preset name")
    id_field:        str   = "devtoId"
    published_field: str   = "devtoPublished"
    skip_field:      str   = "devtoSkip"
    url_field:       str   = "devtoUrl"
    record_url:      bool  = Field(default=False, description="Write the article URL back into the front matter after a push")
    debug:           bool  = False
    log_format:      str   = Field(default="text", pattern="^(text|json)$", description="text or json")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from devsync.yaml, then DEVSYNC_<FIELD> env vars, then non-None CLI overrides.

    api_key also falls back to DEVTO_APIKEY.
    """
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")

    if not data.get("api_key") and (key := os.getenv(API_KEY_ENV)):
        data["api_key"] = key

    for name in Settings.model_fields:
        if val := os.getenv(f"DEVSYNC_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
