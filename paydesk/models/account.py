from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Numeric
from paydesk.database import Base


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone_number = Column(String(30), unique=True, nullable=False)
    password_hash = Column(String, nullable=False)

    # sha256 of the token mailed to the user, never the token itself
    reset_token = Column(String(64), nullable=True, index=True)
    reset_token_expiry = Column(DateTime, nullable=True)

    balance = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
