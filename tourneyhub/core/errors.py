"""
Error taxonomy for the tournament ledger.

Every error raised by the services carries:

- ``kind``: the taxonomy bucket (NotFound, InvalidInput, InsufficientFunds,
  InsufficientEscrow, Forbidden, Conflict, Internal)
- ``code``: a stable machine-readable identifier returned to API callers
- ``status_code``: the HTTP status the API layer responds with

Validation and authorization errors are always raised before any mutation.
"""

from typing import Optional


class LedgerError(Exception):
    """Base class for all domain errors"""

    kind = "Internal"
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message, "error": self.code}


# NotFound

class NotFound(LedgerError):
    kind = "NotFound"
    status_code = 404
    default_message = "Not found"


class TournamentNotFound(NotFound):
    default_message = "Tournament not found"


class PlayerNotFound(NotFound):
    default_message = "Player not found"


class OrganizerNotFound(NotFound):
    default_message = "Organizer not found"


class UserNotFound(NotFound):
    default_message = "User not found"


# InvalidInput

class InvalidInput(LedgerError):
    kind = "InvalidInput"
    status_code = 400
    default_message = "Invalid payload"


# Money

class InsufficientFunds(LedgerError):
    kind = "InsufficientFunds"
    status_code = 400
    default_message = "Insufficient wallet balance"


class InsufficientEscrow(LedgerError):
    kind = "InsufficientEscrow"
    status_code = 400
    default_message = "Insufficient locked prize pool"


# Forbidden

class Forbidden(LedgerError):
    kind = "Forbidden"
    status_code = 403
    default_message = "Only the tournament organizer can perform this action"


# Conflict

class Conflict(LedgerError):
    kind = "Conflict"
    status_code = 400
    default_message = "Conflict"


class AlreadyRegistered(Conflict):
    default_message = "Player already registered for this tournament"


class RegistrationClosed(Conflict):
    default_message = "Tournament registration is closed"


class TournamentFull(Conflict):
    default_message = "Tournament is full"


class RegistrationDeadlinePassed(Conflict):
    default_message = "Registration deadline has passed"


class LinksLocked(Conflict):
    default_message = "Links can only be edited while registration is open"


class ResultsAlreadyDeclared(Conflict):
    default_message = "Results already declared for this tournament"


class MatchNotFinished(Conflict):
    default_message = "Match not finished yet"


class NotEnoughParticipants(Conflict):
    default_message = "Not enough participants to declare results"


class AlreadyReleased(Conflict):
    default_message = "Prize already released"


class NothingLocked(Conflict):
    default_message = "No locked prize to release"


class InvalidTransition(Conflict):
    default_message = "Invalid status transition"


class DuplicateEntity(Conflict):
    default_message = "Entity already exists"


class AccountInUse(Conflict):
    default_message = "Account still holds funds or tournaments"


class TournamentInUse(Conflict):
    default_message = "Tournament still holds a locked prize or participants"


class ConcurrentModification(Conflict):
    status_code = 409
    default_message = "Concurrent modification detected, please retry"


# Internal

class ReconciliationRequired(LedgerError):
    """A compensation failed; the ledger needs manual reconciliation"""

    kind = "Internal"
    status_code = 500
    default_message = "Operation failed and requires manual reconciliation"
