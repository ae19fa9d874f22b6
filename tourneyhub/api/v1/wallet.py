"""
Wallet API endpoints
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from tourneyhub.api.responses import ok
from tourneyhub.db.session import get_db
from tourneyhub.services.wallet import deposit, get_balance, get_transactions, withdraw

router = APIRouter()


class WalletMovement(BaseModel):
    """Deposit / withdraw request model"""
    user_id: str = Field(..., alias="userId", description="Player or organizer id")
    user_type: str = Field(..., alias="userType", description="player or organizer")
    amount: int = Field(..., description="Amount in minor units")

    class Config:
        populate_by_name = True


@router.post("/wallet/deposit")
async def deposit_endpoint(request: WalletMovement, session: AsyncSession = Depends(get_db)):
    """
    Add funds to a wallet and record a deposit transaction.
    """
    result = await deposit(session, request.user_id, request.user_type, request.amount)
    return ok(result, message="Deposit successful")


@router.post("/wallet/withdraw")
async def withdraw_endpoint(request: WalletMovement, session: AsyncSession = Depends(get_db)):
    """
    Remove funds from a wallet and record a withdraw transaction.
    """
    result = await withdraw(session, request.user_id, request.user_type, request.amount)
    return ok(result, message="Withdrawal successful")


@router.get("/wallet/balance")
async def balance_endpoint(
    user_id: str = Query(..., alias="userId"),
    user_type: str = Query(..., alias="userType"),
    session: AsyncSession = Depends(get_db)
):
    return ok(await get_balance(session, user_id, user_type))


@router.get("/wallet/transactions")
async def transactions_endpoint(
    user_id: str = Query(..., alias="userId"),
    user_type: str = Query(..., alias="userType"),
    limit: int = Query(50, ge=1, le=200),
    session: AsyncSession = Depends(get_db)
):
    """
    Ledger entries for a wallet owner, newest first.
    """
    return ok(await get_transactions(session, user_id, user_type, limit=limit))
