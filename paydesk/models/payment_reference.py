from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from paydesk.database import Base


class PaymentReference(Base):
    __tablename__ = "payment_references"

    id = Column(Integer, primary_key=True)
    reference = Column(String(100), unique=True, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
