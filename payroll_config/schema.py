"""
Settings Schema (``payroll_config.schema``).

Three independent settings blobs, each persisted under its own key:

* ``AppSettings`` -- company identity, currency, department/position names.
* ``AutoBackupSettings`` -- the automatic backup ring.
* ``BackupReminderSettings`` -- the "you should back up" reminder.

Every dataclass validates itself in ``__post_init__`` (ValueError on bad
values), round-trips through ``to_dict`` / ``from_dict``, and produces an
updated copy with ``merged(partial)``.  Stored blobs are merged over the
defaults, so a blob written by an older version still loads.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Mapping, Self

from payroll_kernel.logging_config import get_logger

logger = get_logger("config.schema")

DEFAULT_DEPARTMENTS: tuple[str, ...] = (
    "Direction",
    "Ressources Humaines",
    "Comptabilité",
    "Marketing",
    "Commercial",
    "Production",
    "Logistique",
    "Informatique",
    "Juridique",
    "Maintenance",
    "Qualité",
    "Autre",
)

DEFAULT_POSITIONS: tuple[str, ...] = (
    "Directeur Général",
    "Directeur",
    "Chef de Département",
    "Chef d'Équipe",
    "Responsable",
    "Superviseur",
    "Technicien",
    "Agent",
    "Assistant",
    "Stagiaire",
    "Consultant",
    "Autre",
)

VALID_BACKUP_INTERVALS = (5, 15, 30, 60)
VALID_REMINDER_FREQUENCIES = (1, 7, 14, 30)


class _SettingsMixin:
    """from_dict / to_dict / merged shared by the settings dataclasses."""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Self:
        """Build from a stored blob; missing keys take their defaults."""
        if not data:
            return cls()
        names = {f.name for f in fields(cls)}
        unknown = set(data) - names
        if unknown:
            logger.warning(
                "settings_unknown_keys_ignored",
                extra={"settings": cls.__name__, "keys": sorted(unknown)},
            )
        return cls(**cls._decode({k: v for k, v in data.items() if k in names}))

    def to_dict(self) -> dict[str, Any]:
        return self._encode(asdict(self))

    def merged(self, partial: Mapping[str, Any]) -> Self:
        """Copy with ``partial`` applied.  Unknown keys raise ValueError."""
        names = {f.name for f in fields(self)}
        unknown = set(partial) - names
        if unknown:
            raise ValueError(f"Unknown {type(self).__name__} fields: {sorted(unknown)}")
        return replace(self, **self._decode(dict(partial)))

    @classmethod
    def _decode(cls, data: dict[str, Any]) -> dict[str, Any]:
        return data

    @staticmethod
    def _encode(data: dict[str, Any]) -> dict[str, Any]:
        return data


@dataclass(frozen=True)
class AppSettings(_SettingsMixin):
    """Company identity and display settings."""

    company_name: str = "VOTRE ENTREPRISE"
    company_address: str = "Adresse de l'entreprise"
    company_phone: str = "+261 XX XX XXX XX"
    company_logo: str = ""  # data URL of the logo image, or empty
    currency: str = "MGA"
    currency_symbol: str = "Ar"
    locale: str = "fr-MG"
    departments: tuple[str, ...] = DEFAULT_DEPARTMENTS
    positions: tuple[str, ...] = DEFAULT_POSITIONS

    def __post_init__(self):
        if len(self.currency) != 3 or not self.currency.isalpha():
            raise ValueError(f"currency must be a 3-letter code, got '{self.currency}'")
        # Lists arrive from JSON/YAML; keep them hashable.
        object.__setattr__(self, "departments", tuple(self.departments))
        object.__setattr__(self, "positions", tuple(self.positions))

    @staticmethod
    def _encode(data: dict[str, Any]) -> dict[str, Any]:
        data["departments"] = list(data["departments"])
        data["positions"] = list(data["positions"])
        return data


@dataclass(frozen=True)
class AutoBackupSettings(_SettingsMixin):
    """Automatic backup ring: off by default, every 30 minutes, 5 slots."""

    enabled: bool = False
    interval_minutes: int = 30
    max_backups: int = 5

    def __post_init__(self):
        if self.interval_minutes not in VALID_BACKUP_INTERVALS:
            raise ValueError(
                f"interval_minutes must be one of {VALID_BACKUP_INTERVALS}, "
                f"got {self.interval_minutes}"
            )
        if self.max_backups < 1:
            raise ValueError(f"max_backups must be at least 1, got {self.max_backups}")

    @property
    def interval_seconds(self) -> int:
        return self.interval_minutes * 60


@dataclass(frozen=True)
class BackupReminderSettings(_SettingsMixin):
    """Backup reminder: off by default, weekly."""

    enabled: bool = False
    frequency_days: int = 7
    last_backup_date: datetime | None = None
    last_reminder_dismissed: datetime | None = None

    def __post_init__(self):
        if self.frequency_days not in VALID_REMINDER_FREQUENCIES:
            raise ValueError(
                f"frequency_days must be one of {VALID_REMINDER_FREQUENCIES}, "
                f"got {self.frequency_days}"
            )

    @classmethod
    def _decode(cls, data: dict[str, Any]) -> dict[str, Any]:
        for key in ("last_backup_date", "last_reminder_dismissed"):
            if isinstance(data.get(key), str):
                data[key] = datetime.fromisoformat(data[key])
        return data

    @staticmethod
    def _encode(data: dict[str, Any]) -> dict[str, Any]:
        for key in ("last_backup_date", "last_reminder_dismissed"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data


@dataclass(frozen=True)
class SeedSettings:
    """Initial values for the three settings blobs, e.g. from a YAML file."""
    app: AppSettings = field(default_factory=AppSettings)
    auto_backup: AutoBackupSettings = field(default_factory=AutoBackupSettings)
    backup_reminder: BackupReminderSettings = field(default_factory=BackupReminderSettings)
