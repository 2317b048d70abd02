from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import relationship

from tasknest.database import Base
from tasknest.models.user import new_id
from tasknest.utils.dates import utcnow

FRIEND_STATUSES = ("pending", "accepted", "rejected")


class Friend(Base):
    """A directional request between two users, symmetric once accepted.

    The unordered pair is also stored canonically as (user_low, user_high), so
    the unique constraint rejects a B->A request while an A->B record exists.
    """

    __tablename__ = "friends"

    id = Column(String(32), primary_key=True, default=new_id)
    requester_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_low = Column(String(32), nullable=False)
    user_high = Column(String(32), nullable=False)
    status = Column(String(16), nullable=False, default="pending")
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    requester = relationship("User", foreign_keys=[requester_id], lazy="joined")
    recipient = relationship("User", foreign_keys=[recipient_id], lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_low", "user_high", name="uq_friend_pair"),
        CheckConstraint("user_low < user_high", name="ck_friend_low_lt_high"),
        CheckConstraint(
            "status IN (%s)" % ", ".join(f"'{s}'" for s in FRIEND_STATUSES),
            name="ck_friend_status",
        ),
        Index("ix_friends_requester_status", "requester_id", "status"),
        Index("ix_friends_recipient_status", "recipient_id", "status"),
    )

    @classmethod
    def between(cls, requester_id: str, recipient_id: str, **kwargs) -> "Friend":
        low, high = sorted((requester_id, recipient_id))
        return cls(
            requester_id=requester_id,
            recipient_id=recipient_id,
            user_low=low,
            user_high=high,
            **kwargs,
        )

    def other_party(self, user_id: str):
        return self.recipient if self.requester_id == user_id else self.requester
