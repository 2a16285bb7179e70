import json
import os
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from treasury_domain.ledger import WalletKey

from .models import ScenarioPreset

_DEFAULT_SCENARIO = ScenarioPreset(
    balances={
        WalletKey.OPERATING: Decimal(50_000),
        WalletKey.YIELD: Decimal(250_000),
        WalletKey.PAYMENT: Decimal(20_000),
    },
    operating_target=Decimal(50_000),
    baseline_rate_pct=Decimal("0.2"),
    alternative_rate_pct=Decimal("5.0"),
    horizon_months=6,
)

_DEMO_SCENARIO = ScenarioPreset(
    balances={
        WalletKey.OPERATING: Decimal(80_000),
        WalletKey.YIELD: Decimal(320_000),
        WalletKey.PAYMENT: Decimal(15_000),
    },
    operating_target=Decimal(60_000),
    baseline_rate_pct=Decimal("0.2"),
    alternative_rate_pct=Decimal("5.0"),
    horizon_months=6,
)


class SimulationSettings(BaseModel):
    service_name: str = "treasury_sim"
    log_format: str = "text"
    approval_required: bool = True
    audit_export_dir: Path = Path("./audit_exports")
    default_scenario: ScenarioPreset = Field(default_factory=lambda: _DEFAULT_SCENARIO.model_copy(deep=True))
    demo_scenario: ScenarioPreset = Field(default_factory=lambda: _DEMO_SCENARIO.model_copy(deep=True))


# env var -> settings field
_ENV_OVERRIDES = {
    "SERVICE_NAME": "service_name",
    "LOG_FORMAT": "log_format",
    "TREASURY_APPROVAL_REQUIRED": "approval_required",
    "TREASURY_AUDIT_EXPORT_DIR": "audit_export_dir",
}


class SettingsManager:
    """Load simulator settings from a JSON file pointed to by ``TREASURY_SETTINGS_PATH``.

    Environment variables (optionally seeded from ``.env.local``) override
    file values. The result is cached on first access. Tests may replace it
    via :meth:`set_override` and drop the cache with :meth:`reset`.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path_override = Path(path) if path else None
        self._cache: SimulationSettings | None = None

    def _path(self) -> Path:
        return self._path_override or Path(
            os.getenv("TREASURY_SETTINGS_PATH", "./treasury_settings.json")
        )

    def _load(self) -> SimulationSettings:
        if self._cache is None:
            load_dotenv(dotenv_path=".env.local", override=False)
            data: Dict[str, Any] = {}
            try:
                with self._path().open("r", encoding="utf-8") as fh:
                    data = json.load(fh)
            except FileNotFoundError:
                pass
            for env_name, field_name in _ENV_OVERRIDES.items():
                value = os.getenv(env_name)
                if value is not None:
                    data[field_name] = value
            self._cache = SimulationSettings.model_validate(data)
        return self._cache

    def get(self) -> SimulationSettings:
        return self._load()

    def set_override(self, data: Dict[str, Any]) -> None:
        """Replace the cached settings (test helper)."""

        self._cache = SimulationSettings.model_validate(data)

    def reset(self) -> None:
        self._cache = None


# Global default manager
settings = SettingsManager()


def get_settings() -> SimulationSettings:
    """Convenience wrapper around :class:`SettingsManager`."""

    return settings.get()


def load_settings(path: Optional[str | Path]) -> SimulationSettings:
    """Read settings from *path* without touching the global cache."""
    return SettingsManager(path).get()
