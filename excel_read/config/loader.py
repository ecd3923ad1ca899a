from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load YAML config (default config/extract.yml)
- Validate against config_schema.json (shipped next to this module)
- Apply defaults (header_row=1, Firstname/Lastname/Email field mapping)
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/extract.yml")


class ConfigError(Exception):
    pass


def _default_fields() -> dict[str, str]:
    return {"firstname": "Firstname", "lastname": "Lastname", "email": "Email"}


@dataclass(frozen=True)
class ExtractConfig:
    source_directory: str
    header_row: int = 1
    fields: dict[str, str] = field(default_factory=_default_fields)  # record 属性 -> ヘッダ名
    date_fields: list[str] = field(default_factory=list)
    output: str | None = None  # JSON Lines 出力先 (None なら出力しない)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing/invalid, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> ExtractConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    return ExtractConfig(
        source_directory=data["source_directory"],
        header_row=data.get("header_row", 1),
        # 未指定キーは既定ヘッダ名で補完
        fields={**_default_fields(), **(data.get("fields") or {})},
        date_fields=list(data.get("date_fields") or []),
        output=data.get("output"),
    )
