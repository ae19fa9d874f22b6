"""
Unit tests for the error taxonomy
"""

from tourneyhub.core.errors import (
    AccountInUse, AlreadyRegistered, ConcurrentModification, Forbidden, InsufficientEscrow,
    InsufficientFunds, InvalidInput, LedgerError, MatchNotFinished,
    PlayerNotFound, ReconciliationRequired, TournamentInUse,
)


def test_error_codes_are_class_names():
    assert PlayerNotFound().code == "PlayerNotFound"
    assert AlreadyRegistered().code == "AlreadyRegistered"


def test_kinds_and_statuses():
    assert (PlayerNotFound().kind, PlayerNotFound().status_code) == ("NotFound", 404)
    assert (InvalidInput().kind, InvalidInput().status_code) == ("InvalidInput", 400)
    assert (InsufficientFunds().kind, InsufficientFunds().status_code) == ("InsufficientFunds", 400)
    assert (InsufficientEscrow().kind, InsufficientEscrow().status_code) == ("InsufficientEscrow", 400)
    assert (Forbidden().kind, Forbidden().status_code) == ("Forbidden", 403)
    assert (AlreadyRegistered().kind, AlreadyRegistered().status_code) == ("Conflict", 400)
    assert ConcurrentModification().status_code == 409
    assert (AccountInUse().kind, AccountInUse().status_code) == ("Conflict", 400)
    assert (TournamentInUse().kind, TournamentInUse().status_code) == ("Conflict", 400)
    assert (ReconciliationRequired().kind, ReconciliationRequired().status_code) == ("Internal", 500)


def test_custom_message_and_context():
    error = InvalidInput("Bad dates", field="startDate")
    assert str(error) == "Bad dates"
    assert error.context == {"field": "startDate"}


def test_to_dict_envelope():
    assert MatchNotFinished().to_dict() == {
        "success": False,
        "message": "Match not finished yet",
        "error": "MatchNotFinished",
    }


def test_base_error_is_internal():
    error = LedgerError()
    assert error.kind == "Internal"
    assert error.status_code == 500
