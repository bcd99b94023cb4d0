import enum
import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from paydesk.errors import DependencyError
from paydesk.models.account import Account
from paydesk.models.payment_reference import PaymentReference
from paydesk.schemas.account import normalize_email
from paydesk.utils.paystack import PaystackClient

logger = logging.getLogger("paydesk.payments")


class PaymentOutcome(enum.Enum):
    CREDITED = "credited"
    ACCOUNT_NOT_FOUND = "account_not_found"
    FAILED = "failed"
    ERROR = "error"
    ALREADY_APPLIED = "already_applied"


FLASH_MESSAGES = {
    PaymentOutcome.CREDITED: ("success", "Your balance has been updated successfully."),
    PaymentOutcome.ACCOUNT_NOT_FOUND: ("error", "User not found. Please contact support."),
    PaymentOutcome.FAILED: ("error", "Payment verification failed. Please try again."),
    PaymentOutcome.ERROR: ("error", "An error occurred during payment verification. Please try again."),
    PaymentOutcome.ALREADY_APPLIED: ("error", "This payment has already been applied to your balance."),
}


def minor_to_major(amount: int) -> Decimal:
    return (Decimal(amount) / 100).quantize(Decimal("0.01"))


def _already_applied(db: Session, reference: str) -> bool:
    return db.query(PaymentReference.id).filter(PaymentReference.reference == reference).first() is not None


def apply_payment(db: Session, client: PaystackClient, reference: str) -> PaymentOutcome:
    """Verify ``reference`` with the provider and credit the payer once.

    The provider is asked exactly once; nothing is retried. A reference that
    has been credited before is never credited again.
    """
    if _already_applied(db, reference):
        logger.warning("Payment reference %s replayed", reference)
        return PaymentOutcome.ALREADY_APPLIED

    try:
        result = client.verify(reference)
    except DependencyError:
        return PaymentOutcome.ERROR

    if not result.successful:
        return PaymentOutcome.FAILED

    account = db.query(Account).filter(Account.email == normalize_email(result.email)).first()
    if not account:
        logger.warning("Payment %s for unknown email %s", reference, result.email)
        return PaymentOutcome.ACCOUNT_NOT_FOUND

    amount = minor_to_major(result.amount)
    # evaluated by the database, so concurrent credits do not overwrite each other
    account.balance = Account.balance + amount
    db.add(PaymentReference(reference=reference, account_id=account.id, amount=amount))
    try:
        db.commit()
    except IntegrityError:
        # a concurrent request recorded the same reference first
        db.rollback()
        logger.warning("Payment reference %s applied concurrently", reference)
        return PaymentOutcome.ALREADY_APPLIED

    logger.info("Credited %s to account %s (reference %s)", amount, account.id, reference)
    return PaymentOutcome.CREDITED
