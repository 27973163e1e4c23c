"""Request Dependencies — hand the lifespan-built services to route handlers.

Invariants:
    - Services live on app.state.container, set once by the lifespan
    - Missing container is a startup bug, reported as RuntimeError
"""

from fastapi import Request

from funds_transfer.container import ServiceContainer
from funds_transfer.infrastructure.database import DatabaseSessionManager
from funds_transfer.services.account_ledger import AccountLedger
from funds_transfer.services.transfer_orchestrator import TransferOrchestrator


def get_container(request: Request) -> ServiceContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Service container not initialized")
    return container


def get_orchestrator(request: Request) -> TransferOrchestrator:
    return get_container(request).orchestrator


def get_ledger(request: Request) -> AccountLedger:
    return get_container(request).ledger


def get_db_manager(request: Request) -> DatabaseSessionManager:
    return get_container(request).db
