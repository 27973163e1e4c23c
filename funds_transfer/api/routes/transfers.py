"""Transfer Routes — create, list, approve and reject transfers.

Invariants:
    - Request bodies validated by Pydantic before reaching the handler
    - Every domain failure propagates as TransferEngineError to the global handler
    - account_id is required for listing (history is always per account)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from funds_transfer.api.dependencies import get_orchestrator
from funds_transfer.core.domain_types import AccountId, TransferId
from funds_transfer.schemas.transfer import (
    TransferCreate, TransferHistoryResponse, TransferResponse,
)
from funds_transfer.services.transfer_orchestrator import TransferOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/transfers", tags=["transfers"])


@router.post(
    "", response_model=TransferResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_transfer(
    body: TransferCreate,
    orchestrator: TransferOrchestrator = Depends(get_orchestrator),
):
    """Create a transfer. Amounts above the threshold stay PENDING for review."""
    transfer = await orchestrator.create_transfer(
        AccountId(body.source_account_id),
        AccountId(body.destination_account_id),
        body.amount,
    )
    return TransferResponse.model_validate(transfer)


@router.get("", response_model=TransferHistoryResponse)
async def list_transfers(
    account_id: UUID = Query(...),
    orchestrator: TransferOrchestrator = Depends(get_orchestrator),
):
    """Transfer history for one account, newest first."""
    history = await orchestrator.get_history(AccountId(account_id))
    return TransferHistoryResponse.model_validate(history)


@router.patch("/{transfer_id}/approve", response_model=TransferResponse)
async def approve_transfer(
    transfer_id: UUID,
    orchestrator: TransferOrchestrator = Depends(get_orchestrator),
):
    """Approve a pending transfer and move the funds."""
    transfer = await orchestrator.approve(TransferId(transfer_id))
    return TransferResponse.model_validate(transfer)


@router.patch("/{transfer_id}/reject", response_model=TransferResponse)
async def reject_transfer(
    transfer_id: UUID,
    orchestrator: TransferOrchestrator = Depends(get_orchestrator),
):
    """Reject a pending transfer."""
    transfer = await orchestrator.reject(TransferId(transfer_id))
    return TransferResponse.model_validate(transfer)
