"""Domain state for the treasury sweep simulator."""
from .approval import ApprovalGate
from .connection import ConnectionMode, ConnectionState
from .flow import FlowStep, GuidedFlow
from .ledger import Ledger, WalletKey
from .policy import Policy, PolicyStore

__all__ = [
    "ApprovalGate",
    "ConnectionMode",
    "ConnectionState",
    "FlowStep",
    "GuidedFlow",
    "Ledger",
    "Policy",
    "PolicyStore",
    "WalletKey",
]
