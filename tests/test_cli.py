import json
from decimal import Decimal

from treasury_orchestrator import cli


def test_cli_demo_sweep(tmp_path, capsys):
    out_dir = tmp_path / "out"
    rc = cli.main(
        ["--demo", "--connect", "WalletLink", "--approve", "--sweep", "Guided", "--export-dir", str(out_dir)]
    )
    assert rc == 0

    captured = capsys.readouterr()
    snap = json.loads(captured.out)
    assert Decimal(snap["balances"]["Operating"]) == Decimal(60_000)
    assert snap["last_sweep"]["path"] == "Guided"

    files = list(out_dir.glob("*.csv"))
    assert files, "CLI did not write any export file"


def test_cli_reports_blocked_sweep(capsys):
    rc = cli.main(["--sweep", "Quick"])
    assert rc == 0
    captured = capsys.readouterr()
    assert "sweep blocked: not_connected" in captured.err
    assert json.loads(captured.out)["last_sweep"] is None
