"""
Settings Loader (``payroll_config.loader``).

Reads a YAML seed file into ``SeedSettings``.  The file has up to three
top-level sections, each optional::

    app:
      company_name: "ACME SARL"
      currency: MGA
      currency_symbol: Ar
    auto_backup:
      enabled: true
      interval_minutes: 15
    backup_reminder:
      enabled: true
      frequency_days: 7

Failure modes
-------------
* Missing file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown section or invalid value  -> ``ValueError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import (
    AppSettings,
    AutoBackupSettings,
    BackupReminderSettings,
    SeedSettings,
)

_SECTIONS = {
    "app": AppSettings,
    "auto_backup": AutoBackupSettings,
    "backup_reminder": BackupReminderSettings,
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load one YAML file; an empty file yields an empty dict."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level, got {type(data).__name__}")
    return data


def parse_seed_settings(data: dict[str, Any]) -> SeedSettings:
    unknown = set(data) - set(_SECTIONS)
    if unknown:
        raise ValueError(f"Unknown settings sections: {sorted(unknown)}")

    parsed = {}
    for section, cls in _SECTIONS.items():
        raw = data.get(section) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Settings section '{section}' must be a mapping")
        # merged() rejects unknown keys where from_dict() only warns
        parsed[section] = cls().merged(raw)
    return SeedSettings(**parsed)


def load_seed_settings(path: Path | str) -> SeedSettings:
    return parse_seed_settings(load_yaml_file(Path(path)))
