import argparse
import json
import sys
from pathlib import Path

from common.logging import configure_logging
from treasury_observability.metrics import maybe_start_http_server

from .models import SweepPath
from .session import TreasurySession
from .settings import get_settings, load_settings


def parse_args(argv=None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        prog="python -m treasury_orchestrator.cli",
        description="Run a scripted treasury sweep simulation and print the resulting snapshot",
    )
    ap.add_argument("--settings", help="JSON settings file (defaults to TREASURY_SETTINGS_PATH)")
    ap.add_argument("--demo", action="store_true", help="load the demo scenario first")
    ap.add_argument("--connect", choices=["DemoFeed", "WalletLink"], help="connect before sweeping")
    ap.add_argument("--operating", help="override the Operating balance")
    ap.add_argument("--target", help="override the operating target")
    ap.add_argument("--approve", action="store_true", help="grant approval before sweeping")
    ap.add_argument("--no-approval", action="store_true", help="turn the approval requirement off")
    ap.add_argument("--sweep", choices=[p.value for p in SweepPath], help="attempt a sweep via this path")
    ap.add_argument("--export-dir", help="write the audit CSV into this directory")
    return ap.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = load_settings(args.settings) if args.settings else get_settings()
    # stdout carries the snapshot JSON
    configure_logging(settings.log_format, service_name=settings.service_name, stream=sys.stderr)
    maybe_start_http_server()

    session = TreasurySession(settings)
    if args.demo:
        session.load_demo_scenario()
    if args.operating is not None:
        session.set_balance("Operating", args.operating)
    if args.target is not None:
        session.set_target(args.target)
    if args.connect:
        session.connect(args.connect)
    if args.no_approval:
        session.set_approval_required(False)
    if args.approve:
        session.approve()
    if args.sweep:
        if session.execute_sweep(args.sweep) is None:
            print(f"sweep blocked: {session.sweep_readiness().reason.value}", file=sys.stderr)

    print(session.snapshot().model_dump_json(indent=2))
    if args.export_dir:
        path = session.write_audit_export(Path(args.export_dir))
        print(f"audit export written to {path}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
