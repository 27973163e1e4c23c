"""Account Routes — read-only balance lookup."""

from uuid import UUID

from fastapi import APIRouter, Depends

from funds_transfer.api.dependencies import get_db_manager, get_ledger
from funds_transfer.core.domain_types import AccountId
from funds_transfer.infrastructure.database import DatabaseSessionManager
from funds_transfer.schemas.transfer import AccountBalanceResponse
from funds_transfer.services.account_ledger import AccountLedger

router = APIRouter(prefix="/api/v1/accounts", tags=["accounts"])


@router.get("/{account_id}/balance", response_model=AccountBalanceResponse)
async def get_balance(
    account_id: UUID,
    db: DatabaseSessionManager = Depends(get_db_manager),
    ledger: AccountLedger = Depends(get_ledger),
):
    """Current balance and version of one account."""
    async with db.session() as session:
        account = await ledger.get_or_fail(session, AccountId(account_id))
    return AccountBalanceResponse(
        account_id=account.id, balance=account.balance, version=account.version,
    )
