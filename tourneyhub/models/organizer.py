"""
Organizer model
"""

from sqlalchemy import Column, String, Integer, BigInteger, DateTime, Text, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from tourneyhub.core.timeutils import utcnow, isoformat
from tourneyhub.db.base import Base
from tourneyhub.models.enums import OrganizerStatus, UserType
import uuid


class Organizer(Base):
    """Organizer model - funds tournaments and holds locked prize escrow"""
    __tablename__ = "organizers"

    pk = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    id = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(32), nullable=False)
    experience = Column(Text, nullable=False)
    organization_name = Column(String(255), nullable=False, default='')
    status = Column(String(16), nullable=False, default=OrganizerStatus.APPROVED.value)
    wallet_balance = Column(BigInteger, nullable=False, default=0)
    locked_prize_pool = Column(BigInteger, nullable=False, default=0)
    tournaments_organized = Column(Integer, nullable=False, default=0)
    total_prize_pools = Column(BigInteger, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint('wallet_balance >= 0', name='chk_organizer_wallet_nonneg'),
        CheckConstraint('locked_prize_pool >= 0', name='chk_organizer_locked_nonneg'),
    )

    __mapper_args__ = {"version_id_col": version}

    user_type = UserType.ORGANIZER

    @property
    def display_name(self) -> str:
        return self.name

    def __repr__(self):
        return (
            f"<Organizer(id={self.id}, wallet={self.wallet_balance}, "
            f"locked={self.locked_prize_pool})>"
        )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "experience": self.experience,
            "organizationName": self.organization_name,
            "status": self.status,
            "walletBalance": self.wallet_balance,
            "lockedPrizePool": self.locked_prize_pool,
            "tournamentsOrganized": self.tournaments_organized,
            "totalPrizePools": self.total_prize_pools,
            "createdAt": isoformat(self.created_at),
        }
