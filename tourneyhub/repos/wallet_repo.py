"""
Wallet repository with atomic balance operations.

These are the only functions that write ``wallet_balance`` and
``locked_prize_pool``. Rows are re-read with SELECT ... FOR UPDATE before
every change and written under the model's optimistic version counter, so a
concurrent writer surfaces as ConcurrentModification instead of a lost update.

Nothing here commits; the caller owns the transaction.
"""

from typing import Optional, Union
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm.exc import StaleDataError

from tourneyhub.core.errors import (
    ConcurrentModification, InsufficientEscrow, InsufficientFunds,
    InvalidInput, OrganizerNotFound, PlayerNotFound,
)
from tourneyhub.models.enums import UserType
from tourneyhub.models.organizer import Organizer
from tourneyhub.models.player import Player

# Configure logging
logger = logging.getLogger(__name__)

WalletOwner = Union[Player, Organizer]

_MODELS = {
    UserType.PLAYER: Player,
    UserType.ORGANIZER: Organizer,
}


def parse_user_type(value: Union[str, UserType]) -> UserType:
    if isinstance(value, UserType):
        return value
    try:
        return UserType(value)
    except ValueError:
        raise InvalidInput("Invalid user type")


async def get_wallet_owner(
    session: AsyncSession,
    user_type: UserType,
    user_id: str,
    for_update: bool = False
) -> Optional[WalletOwner]:
    """
    Load a player or organizer by application id.

    Args:
        session: Database session
        user_type: Which collection to look in
        user_id: Application-level id
        for_update: Lock the row for the rest of the transaction

    Returns:
        Player/Organizer instance or None if not found
    """
    model = _MODELS[user_type]
    query = select(model).where(model.id == user_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def lock_wallet_owner(session: AsyncSession, user_type: UserType, user_id: str) -> WalletOwner:
    """Load and lock a wallet owner, raising the matching NotFound error"""
    owner = await get_wallet_owner(session, user_type, user_id, for_update=True)
    if owner is None:
        if user_type is UserType.PLAYER:
            raise PlayerNotFound(user_id=user_id)
        raise OrganizerNotFound(user_id=user_id)
    return owner


async def _flush(session: AsyncSession, owner_id: str) -> None:
    try:
        await session.flush()
    except StaleDataError:
        logger.warning(f"Version conflict while updating wallet {owner_id}")
        raise ConcurrentModification(user_id=owner_id)


async def adjust_balance(
    session: AsyncSession,
    user_type: UserType,
    user_id: str,
    amount: int
) -> int:
    """
    Add ``amount`` (may be negative) to a wallet balance.

    Args:
        session: Database session
        user_type: Player or organizer
        user_id: Application-level id
        amount: Signed change in minor currency units

    Returns:
        The new wallet balance

    Raises:
        InsufficientFunds: if the balance would drop below zero
    """
    owner = await lock_wallet_owner(session, user_type, user_id)

    new_balance = owner.wallet_balance + amount
    if new_balance < 0:
        logger.warning(
            f"Rejected wallet change of {amount} for {user_type.value} {user_id}: "
            f"balance {owner.wallet_balance}"
        )
        raise InsufficientFunds(user_id=user_id, balance=owner.wallet_balance, amount=amount)

    owner.wallet_balance = new_balance
    await _flush(session, user_id)

    logger.info(f"Adjusted {user_type.value} {user_id} wallet by {amount}. New balance: {new_balance}")
    return new_balance


async def adjust_locked_pool(session: AsyncSession, organizer_id: str, amount: int) -> int:
    """
    Add ``amount`` (may be negative) to an organizer's locked prize pool.

    Raises:
        InsufficientEscrow: if the locked pool would drop below zero
    """
    organizer = await lock_wallet_owner(session, UserType.ORGANIZER, organizer_id)

    new_locked = organizer.locked_prize_pool + amount
    if new_locked < 0:
        logger.warning(
            f"Rejected escrow change of {amount} for organizer {organizer_id}: "
            f"locked {organizer.locked_prize_pool}"
        )
        raise InsufficientEscrow(organizer_id=organizer_id, locked=organizer.locked_prize_pool, amount=amount)

    organizer.locked_prize_pool = new_locked
    await _flush(session, organizer_id)

    logger.info(f"Adjusted organizer {organizer_id} locked pool by {amount}. New locked pool: {new_locked}")
    return new_locked
