import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from paydesk.errors import TokenExpired, TokenNotFound
from paydesk.models.account import Account
from paydesk.utils.hashing import hash_password

logger = logging.getLogger("paydesk.reset")

RESET_TTL_MINUTES = 60


def utcnow() -> datetime:
    # naive UTC, the form the DateTime columns round-trip as
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_reset_token() -> str:
    # the raw token is only ever shown to the user (in the emailed link)
    return secrets.token_urlsafe(32)


def hash_token(token: str) -> str:
    # DB stores the hash so a leaked table does not hand out usable tokens
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def issue_reset_token(db: Session, account: Account, ttl_minutes: int = RESET_TTL_MINUTES) -> str:
    """Start (or restart) a reset for ``account`` and return the raw token.

    Issuing again simply overwrites the previous token and expiry.
    """
    raw_token = generate_reset_token()
    account.reset_token = hash_token(raw_token)
    account.reset_token_expiry = utcnow() + timedelta(minutes=ttl_minutes)
    db.commit()

    logger.info("Reset token issued for account %s", account.id)
    return raw_token


def redeem_reset_token(db: Session, token: str, new_password: str) -> Account:
    """Replace the password of the account holding ``token``.

    Raises :class:`TokenNotFound` when no account holds the token and
    :class:`TokenExpired` once the expiry has been reached. In both cases
    nothing is written.
    """
    if not token:
        raise TokenNotFound("Invalid or expired token")

    account = db.query(Account).filter(Account.reset_token == hash_token(token)).first()
    if not account or account.reset_token_expiry is None:
        raise TokenNotFound("Invalid or expired token")

    if utcnow() >= account.reset_token_expiry:
        logger.info("Expired reset token presented for account %s", account.id)
        raise TokenExpired("Invalid or expired token")

    # hash first: a CredentialError must leave the token usable
    account.password_hash = hash_password(new_password)
    account.reset_token = None
    account.reset_token_expiry = None
    db.commit()

    logger.info("Password reset for account %s", account.id)
    return account
