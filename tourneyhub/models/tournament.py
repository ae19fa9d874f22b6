"""
Tournament, participant and winner models
"""

from sqlalchemy import (
    Column, String, Integer, BigInteger, Boolean, DateTime, Text,
    CheckConstraint, UniqueConstraint, ForeignKey,
)
from sqlalchemy.dialects.postgresql import UUID
from tourneyhub.core.timeutils import utcnow, isoformat
from tourneyhub.db.base import Base
from tourneyhub.models.enums import TournamentStatus, TournamentFormat
import uuid


class Tournament(Base):
    """Tournament model - the unit of prize escrow"""
    __tablename__ = "tournaments"

    pk = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    id = Column(String(64), nullable=False, unique=True, index=True)
    tournament_name = Column(String(255), nullable=False)
    organizer_id = Column(String(64), ForeignKey("organizers.id"), nullable=False, index=True)
    organizer_name = Column(String(255), nullable=False)
    game = Column(String(16), nullable=False, index=True)
    mode = Column(String(16), nullable=False)
    format = Column(String(32), nullable=False, default=TournamentFormat.BATTLE_ROYALE.value)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=True)
    registration_deadline = Column(DateTime(timezone=True), nullable=False)
    max_teams = Column(Integer, nullable=False)
    current_participants = Column(Integer, nullable=False, default=0)
    prize_pool = Column(BigInteger, nullable=False)
    prize_distribution = Column(String(64), nullable=False, default="60-30-10")
    has_entry_fee = Column(Boolean, nullable=False, default=False)
    entry_fee = Column(BigInteger, nullable=False, default=0)
    min_age = Column(Integer, nullable=False, default=13)
    region = Column(String(64), nullable=False, default='global')
    rules = Column(Text, nullable=False, default='Standard tournament rules apply.')
    description = Column(Text, nullable=False, default='')
    stream_url = Column(String(512), nullable=False, default='')
    discord_url = Column(String(512), nullable=False, default='')
    status = Column(String(32), nullable=False, default=TournamentStatus.REGISTRATION_OPEN.value, index=True)

    # Financial tracking
    entry_fee_collected = Column(BigInteger, nullable=False, default=0)
    prize_locked = Column(BigInteger, nullable=False, default=0)
    result_declared_at = Column(DateTime(timezone=True), nullable=True)
    prize_released_at = Column(DateTime(timezone=True), nullable=True)
    prize_release_note = Column(Text, nullable=False, default='')

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint('max_teams >= 2', name='chk_tournament_max_teams'),
        CheckConstraint('current_participants >= 0', name='chk_tournament_participants_nonneg'),
        CheckConstraint('current_participants <= max_teams', name='chk_tournament_capacity'),
        CheckConstraint('entry_fee >= 0', name='chk_tournament_entry_fee_nonneg'),
        CheckConstraint('entry_fee_collected >= 0', name='chk_tournament_fee_collected_nonneg'),
        CheckConstraint('prize_locked >= 0', name='chk_tournament_prize_locked_nonneg'),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return (
            f"<Tournament(id={self.id}, status={self.status}, "
            f"prize_locked={self.prize_locked}, participants={self.current_participants})>"
        )

    def to_dict(self, participants=None, winners=None):
        """Convert tournament to dictionary for API responses"""
        data = {
            "id": self.id,
            "tournamentName": self.tournament_name,
            "organizerId": self.organizer_id,
            "organizerName": self.organizer_name,
            "game": self.game,
            "mode": self.mode,
            "format": self.format,
            "startDate": isoformat(self.start_date),
            "endDate": isoformat(self.end_date),
            "registrationDeadline": isoformat(self.registration_deadline),
            "maxTeams": self.max_teams,
            "currentParticipants": self.current_participants,
            "prizePool": self.prize_pool,
            "prizeDistribution": self.prize_distribution,
            "hasEntryFee": self.has_entry_fee,
            "entryFee": self.entry_fee,
            "minAge": self.min_age,
            "region": self.region,
            "rules": self.rules,
            "description": self.description,
            "streamUrl": self.stream_url,
            "discordUrl": self.discord_url,
            "status": self.status,
            "entryFeeCollected": self.entry_fee_collected,
            "prizeLocked": self.prize_locked,
            "resultDeclaredAt": isoformat(self.result_declared_at),
            "prizeReleasedAt": isoformat(self.prize_released_at),
            "prizeReleaseNote": self.prize_release_note,
            "createdAt": isoformat(self.created_at),
        }
        if participants is not None:
            data["participants"] = [p.to_dict() for p in participants]
        if winners is not None:
            data["winners"] = [w.to_dict() for w in winners]
        return data


class TournamentParticipant(Base):
    """Registered participant, ordered by registration sequence"""
    __tablename__ = "tournament_participants"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    tournament_id = Column(String(64), ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True)
    player_id = Column(String(64), nullable=False)
    player_name = Column(String(255), nullable=False)
    team_name = Column(String(255), nullable=False)
    registered_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint('tournament_id', 'player_id', name='uq_tournament_player'),
    )

    def __repr__(self):
        return f"<TournamentParticipant(tournament={self.tournament_id}, player={self.player_id})>"

    def to_dict(self):
        return {
            "playerId": self.player_id,
            "playerName": self.player_name,
            "teamName": self.team_name,
            "registeredAt": isoformat(self.registered_at),
        }


class TournamentWinner(Base):
    """Declared winner with the prize credited"""
    __tablename__ = "tournament_winners"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    tournament_id = Column(String(64), ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    player_id = Column(String(64), nullable=False)
    player_name = Column(String(255), nullable=False)
    team_name = Column(String(255), nullable=False, default='')
    prize = Column(BigInteger, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint('tournament_id', 'position', name='uq_tournament_position'),
        CheckConstraint('prize >= 0', name='chk_winner_prize_nonneg'),
    )

    def __repr__(self):
        return f"<TournamentWinner(tournament={self.tournament_id}, position={self.position}, prize={self.prize})>"

    def to_dict(self):
        return {
            "position": self.position,
            "playerId": self.player_id,
            "playerName": self.player_name,
            "teamName": self.team_name,
            "prize": self.prize,
        }
