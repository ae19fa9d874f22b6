"""
Wallet service: manual deposits and withdrawals, balance and history queries
"""

from typing import List, Union
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from tourneyhub.core.errors import InvalidInput, UserNotFound
from tourneyhub.models.enums import OperationKind, TransactionType, UserType
from tourneyhub.repos.transaction_repo import create_transaction, get_transactions_by_user
from tourneyhub.repos.wallet_repo import adjust_balance, get_wallet_owner, parse_user_type
from tourneyhub.services.saga import Saga, run_operation

# Configure logging
logger = logging.getLogger(__name__)

DEPOSIT_REFERENCE = "manual_deposit"
WITHDRAW_REFERENCE = "manual_withdraw"


def _validate_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidInput("Amount must be a positive integer")


async def _move(
    session: AsyncSession,
    kind: OperationKind,
    user_id: str,
    user_type: Union[str, UserType],
    amount: int
) -> dict:
    owner_type = parse_user_type(user_type)
    signed = amount if kind is OperationKind.DEPOSIT else -amount
    tx_type = TransactionType.DEPOSIT if kind is OperationKind.DEPOSIT else TransactionType.WITHDRAW
    reference = DEPOSIT_REFERENCE if kind is OperationKind.DEPOSIT else WITHDRAW_REFERENCE

    async def body(saga: Saga) -> dict:
        _validate_amount(amount)
        if await get_wallet_owner(session, owner_type, user_id, for_update=True) is None:
            raise UserNotFound(user_id=user_id)

        async def apply():
            balance = await adjust_balance(session, owner_type, user_id, signed)
            transaction = await create_transaction(
                session, user_id, owner_type, tx_type, amount,
                reference=reference,
                operation_id=saga.operation_id
            )
            return balance, transaction

        balance, transaction = await saga.step(kind.value, apply)
        return {"balance": balance, "transaction": transaction.to_dict()}

    return await run_operation(
        session, kind, user_id, body, meta={"userType": owner_type.value, "amount": amount}
    )


async def deposit(session: AsyncSession, user_id: str, user_type: Union[str, UserType], amount: int) -> dict:
    """
    Add funds to a wallet.

    Returns:
        Dictionary with the new balance and the ``deposit`` transaction
    """
    result = await _move(session, OperationKind.DEPOSIT, user_id, user_type, amount)
    logger.info(f"Deposited {amount} to {user_id}")
    return result


async def withdraw(session: AsyncSession, user_id: str, user_type: Union[str, UserType], amount: int) -> dict:
    """
    Remove funds from a wallet.

    Raises:
        InsufficientFunds: if the balance is below ``amount``
    """
    result = await _move(session, OperationKind.WITHDRAW, user_id, user_type, amount)
    logger.info(f"Withdrew {amount} from {user_id}")
    return result


async def get_balance(session: AsyncSession, user_id: str, user_type: Union[str, UserType]) -> dict:
    owner_type = parse_user_type(user_type)
    owner = await get_wallet_owner(session, owner_type, user_id)
    if owner is None:
        raise UserNotFound(user_id=user_id)

    data = {
        "userId": owner.id,
        "userType": owner_type.value,
        "walletBalance": owner.wallet_balance,
    }
    if owner_type is UserType.ORGANIZER:
        data["lockedPrizePool"] = owner.locked_prize_pool
    return data


async def get_transactions(
    session: AsyncSession,
    user_id: str,
    user_type: Union[str, UserType],
    limit: int = 50,
    offset: int = 0
) -> List[dict]:
    """Ledger entries of a wallet owner, newest first"""
    owner_type = parse_user_type(user_type)
    transactions = await get_transactions_by_user(session, user_id, owner_type, limit=limit, offset=offset)
    return [t.to_dict() for t in transactions]
