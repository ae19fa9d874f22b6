# Models Package
from .player import Player
from .organizer import Organizer
from .tournament import Tournament, TournamentParticipant, TournamentWinner
from .transaction import Transaction
from .ledger_operation import LedgerOperation

__all__ = [
    "Player",
    "Organizer",
    "Tournament",
    "TournamentParticipant",
    "TournamentWinner",
    "Transaction",
    "LedgerOperation"
]
