"""FastAPI router exposing a treasury session to a presentation layer.

One :class:`TreasurySession` lives on ``app.state.treasury``. The router only
translates HTTP into session operations; all gating stays in the session.
Use :func:`create_app` for a standalone app (tests, uvicorn).
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse
from prometheus_client import make_asgi_app
from pydantic import BaseModel

from common.logging import configure_logging
from treasury_domain.connection import ConnectionMode
from treasury_domain.flow import FlowStep
from treasury_domain.ledger import WalletKey
from treasury_domain.policy import Policy

from .audit import AuditEvent
from .models import LastSweepSummary, ProjectionPoint, SweepPath, SweepReadiness
from .session import TreasurySession, TreasurySnapshot

router = APIRouter(prefix="/treasury")

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

RawNumber = Union[Decimal, str]


class BalanceRequest(BaseModel):
    value: RawNumber


class BalanceResponse(BaseModel):
    account: WalletKey
    value: Decimal


class PolicyPatch(BaseModel):
    operating_target: Optional[RawNumber] = None
    baseline_rate_pct: Optional[RawNumber] = None
    alternative_rate_pct: Optional[RawNumber] = None
    horizon_months: Optional[RawNumber] = None


class ConnectRequest(BaseModel):
    mode: ConnectionMode


class ApprovalRequiredRequest(BaseModel):
    required: bool


class SweepRequest(BaseModel):
    path: SweepPath = SweepPath.GUIDED


class SweepResponse(BaseModel):
    executed: bool
    summary: Optional[LastSweepSummary] = None
    readiness: SweepReadiness


class FlowRequest(BaseModel):
    step: FlowStep


class FlowResponse(BaseModel):
    step: FlowStep
    label: str


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_session(request: Request) -> TreasurySession:
    return request.app.state.treasury


def _flow_response(step: FlowStep) -> FlowResponse:
    return FlowResponse(step=step, label=step.label)


# ---------------------------------------------------------------------------
# Endpoint impls
# ---------------------------------------------------------------------------


@router.get("/snapshot", response_model=TreasurySnapshot)
def read_snapshot(session: TreasurySession = Depends(get_session)):
    return session.snapshot()


@router.put("/balances/{account}", response_model=BalanceResponse)
def put_balance(account: WalletKey, req: BalanceRequest, session: TreasurySession = Depends(get_session)):
    value = session.set_balance(account, req.value)
    return BalanceResponse(account=account, value=value)


@router.patch("/policy", response_model=Policy)
def patch_policy(req: PolicyPatch, session: TreasurySession = Depends(get_session)):
    # each provided field is its own policy edit (and its own audit event)
    if req.operating_target is not None:
        session.set_target(req.operating_target)
    if req.baseline_rate_pct is not None:
        session.set_baseline_rate(req.baseline_rate_pct)
    if req.alternative_rate_pct is not None:
        session.set_alternative_rate(req.alternative_rate_pct)
    if req.horizon_months is not None:
        session.set_horizon(req.horizon_months)
    return session.snapshot().policy


@router.post("/connect")
def post_connect(req: ConnectRequest, session: TreasurySession = Depends(get_session)):
    try:
        mode = session.connect(req.mode)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"connection": mode}


@router.post("/disconnect")
def post_disconnect(session: TreasurySession = Depends(get_session)):
    session.disconnect()
    return {"connection": ConnectionMode.NOT_CONNECTED}


@router.put("/approval/required")
def put_approval_required(req: ApprovalRequiredRequest, session: TreasurySession = Depends(get_session)):
    session.set_approval_required(req.required)
    return session.snapshot().approval


@router.post("/approval/approve")
def post_approve(session: TreasurySession = Depends(get_session)):
    session.approve()
    return session.snapshot().approval


@router.get("/sweep/readiness", response_model=SweepReadiness)
def read_sweep_readiness(session: TreasurySession = Depends(get_session)):
    return session.sweep_readiness()


@router.post("/sweep", response_model=SweepResponse)
def post_sweep(req: SweepRequest | None = None, session: TreasurySession = Depends(get_session)):
    path = req.path if req else SweepPath.GUIDED
    readiness = session.sweep_readiness()
    summary = session.execute_sweep(path)
    # blocked sweeps are not errors; the caller reads the reason
    return SweepResponse(
        executed=summary is not None,
        summary=summary,
        readiness=readiness if summary is None else session.sweep_readiness(),
    )


@router.post("/flow/next", response_model=FlowResponse)
def post_flow_next(session: TreasurySession = Depends(get_session)):
    return _flow_response(session.flow_next())


@router.post("/flow/back", response_model=FlowResponse)
def post_flow_back(session: TreasurySession = Depends(get_session)):
    return _flow_response(session.flow_back())


@router.post("/flow/restart", response_model=FlowResponse)
def post_flow_restart(session: TreasurySession = Depends(get_session)):
    return _flow_response(session.flow_restart())


@router.put("/flow", response_model=FlowResponse)
def put_flow(req: FlowRequest, session: TreasurySession = Depends(get_session)):
    return _flow_response(session.flow_go_to(req.step))


@router.get("/projection", response_model=List[ProjectionPoint])
def read_projection(session: TreasurySession = Depends(get_session)):
    return session.projection()


@router.get("/audit", response_model=List[AuditEvent])
def read_audit(session: TreasurySession = Depends(get_session)):
    return list(session.audit_events())


@router.delete("/audit")
def delete_audit(session: TreasurySession = Depends(get_session)):
    return {"removed": session.clear_audit_log()}


@router.get("/audit/export", response_class=PlainTextResponse)
def export_audit(session: TreasurySession = Depends(get_session)):
    return PlainTextResponse(
        session.export_audit_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="treasury-audit.csv"'},
    )


@router.post("/demo", response_model=TreasurySnapshot)
def post_demo(session: TreasurySession = Depends(get_session)):
    return session.load_demo_scenario()


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(session: TreasurySession | None = None) -> FastAPI:
    session = session or TreasurySession()
    configure_logging(session.settings.log_format, service_name=session.settings.service_name)

    _app = FastAPI(title="Treasury Sweep Simulator")
    _app.state.treasury = session
    # Mount default /metrics exporter exactly once per app
    _app.mount("/metrics", make_asgi_app())

    @_app.get("/healthz")
    def healthz():
        return {"ok": True, "session_id": session.session_id}

    _app.include_router(router)
    _log.info("treasury_api_ready", extra={"session_id": session.session_id})
    return _app


__all__ = [
    "router",
    "create_app",
    "get_session",
]
