import json
from decimal import Decimal
from pathlib import Path

from treasury_domain.ledger import WalletKey
from treasury_orchestrator.settings import SettingsManager, SimulationSettings, get_settings


def test_defaults():
    s = SimulationSettings()
    assert s.approval_required is True
    assert s.default_scenario.balances[WalletKey.YIELD] == Decimal(250_000)
    assert s.demo_scenario.operating_target == Decimal(60_000)
    assert s.demo_scenario.horizon_months == 6


def test_file_and_env_overrides(tmp_path, monkeypatch):
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "service_name": "from_file",
                "demo_scenario": {
                    "balances": {"Operating": "100000", "Yield": "0", "Payment": "0"},
                    "operating_target": "75000",
                    "baseline_rate_pct": "0.5",
                    "alternative_rate_pct": "4.0",
                    "horizon_months": 12,
                },
            }
        )
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SERVICE_NAME", raising=False)
    monkeypatch.setenv("TREASURY_APPROVAL_REQUIRED", "false")
    monkeypatch.setenv("TREASURY_AUDIT_EXPORT_DIR", str(tmp_path / "exports"))

    s = SettingsManager(path).get()
    assert s.service_name == "from_file"
    assert s.approval_required is False
    assert s.audit_export_dir == Path(tmp_path / "exports")
    assert s.demo_scenario.balances[WalletKey.OPERATING] == Decimal(100_000)
    assert s.demo_scenario.horizon_months == 12


def test_missing_file_falls_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TREASURY_APPROVAL_REQUIRED", raising=False)
    s = SettingsManager(tmp_path / "nope.json").get()
    assert s.approval_required is True


def test_override_is_visible_globally(tmp_path):
    assert get_settings().audit_export_dir == tmp_path / "exports"
