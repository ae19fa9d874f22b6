"""
Enumerated values stored as plain strings in the database
"""

import enum


class UserType(enum.Enum):
    """Wallet owner type"""
    PLAYER = "player"
    ORGANIZER = "organizer"


class PlayerStatus(enum.Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"


class OrganizerStatus(enum.Enum):
    APPROVED = "approved"
    SUSPENDED = "suspended"


class Gender(enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class Game(enum.Enum):
    PUBG = "pubg"
    VALORANT = "valorant"
    COD = "cod"


class GameMode(enum.Enum):
    SOLO = "solo"
    DUO = "duo"
    SQUAD = "squad"


class TournamentFormat(enum.Enum):
    BATTLE_ROYALE = "battle-royale"
    SINGLE_ELIMINATION = "single-elimination"
    DOUBLE_ELIMINATION = "double-elimination"
    ROUND_ROBIN = "round-robin"
    SWISS = "swiss"


class TournamentStatus(enum.Enum):
    """Tournament lifecycle status"""
    UPCOMING = "upcoming"
    REGISTRATION_OPEN = "registration-open"
    REGISTRATION_CLOSED = "registration-closed"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TransactionType(enum.Enum):
    """Ledger entry type"""
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    DEDUCT = "deduct"
    LOCK = "lock"
    RELEASE = "release"
    FEE_CREDIT = "fee-credit"
    PRIZE_CREDIT = "prize-credit"
    PRIZE_DISTRIBUTE = "prize-distribute"


class OperationKind(enum.Enum):
    """Business events recorded in the operation journal"""
    CREATE_TOURNAMENT = "create-tournament"
    REGISTER = "register"
    DECLARE_RESULT = "declare-result"
    RELEASE_PRIZE = "release-prize"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


class OperationStatus(enum.Enum):
    """Operation journal status"""
    PENDING = "pending"
    APPLIED = "applied"
    COMPENSATED = "compensated"
    REJECTED = "rejected"
    FAILED = "failed"
    RECONCILE = "reconcile"
    ABANDONED = "abandoned"


class WinnerSelection(enum.Enum):
    """How declare-result picks winners"""
    EXPLICIT = "explicit"
    RANDOM = "random"
