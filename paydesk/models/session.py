from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from paydesk.database import Base


class AuthSession(Base):
    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
