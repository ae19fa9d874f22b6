"""
Player model
"""

from sqlalchemy import Column, String, Integer, BigInteger, DateTime, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from tourneyhub.core.timeutils import utcnow, isoformat
from tourneyhub.db.base import Base
from tourneyhub.models.enums import PlayerStatus, UserType
import uuid


class Player(Base):
    """Player model - wallet-bearing participant"""
    __tablename__ = "players"

    pk = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    id = Column(String(64), nullable=False, unique=True, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(32), nullable=False)
    age = Column(Integer, nullable=False)
    country = Column(String(64), nullable=False)
    gender = Column(String(16), nullable=False)
    status = Column(String(16), nullable=False, default=PlayerStatus.ACTIVE.value)
    wallet_balance = Column(BigInteger, nullable=False, default=0)
    tournaments_participated = Column(Integer, nullable=False, default=0)
    tournaments_won = Column(Integer, nullable=False, default=0)
    total_earnings = Column(BigInteger, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint('wallet_balance >= 0', name='chk_player_wallet_nonneg'),
        CheckConstraint('age >= 13 AND age <= 99', name='chk_player_age'),
    )

    __mapper_args__ = {"version_id_col": version}

    user_type = UserType.PLAYER

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Player(id={self.id}, email={self.email}, wallet={self.wallet_balance})>"

    def to_dict(self):
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "fullName": self.display_name,
            "email": self.email,
            "phone": self.phone,
            "age": self.age,
            "country": self.country,
            "gender": self.gender,
            "status": self.status,
            "walletBalance": self.wallet_balance,
            "tournamentsParticipated": self.tournaments_participated,
            "tournamentsWon": self.tournaments_won,
            "totalEarnings": self.total_earnings,
            "createdAt": isoformat(self.created_at),
        }
