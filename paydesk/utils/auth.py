import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from paydesk.database import get_db
from paydesk.errors import LoginRequired
from paydesk.models.account import Account
from paydesk.models.session import AuthSession

logger = logging.getLogger("paydesk.sessions")

# key under which the opaque session id lives in the signed cookie
SESSION_KEY = "sid"


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _cutoff(max_age: int) -> datetime:
    return utcnow() - timedelta(seconds=max_age)


def purge_expired_sessions(db: Session, max_age: int) -> int:
    removed = db.query(AuthSession).filter(AuthSession.created_at <= _cutoff(max_age)).delete()
    db.commit()
    if removed:
        logger.info("Purged %d expired sessions", removed)
    return removed


def create_session(db: Session, account: Account, max_age: Optional[int] = None) -> str:
    if max_age:
        purge_expired_sessions(db, max_age)
    session_id = secrets.token_urlsafe(32)
    db.add(AuthSession(id=session_id, account_id=account.id, created_at=utcnow()))
    db.commit()
    return session_id


def resolve_session(db: Session, session_id: Optional[str],
                    max_age: Optional[int] = None) -> Optional[Account]:
    """Account behind ``session_id``; sessions older than ``max_age`` seconds are dead."""
    if not session_id:
        return None
    query = (
        db.query(Account)
        .join(AuthSession, AuthSession.account_id == Account.id)
        .filter(AuthSession.id == session_id)
    )
    if max_age:
        query = query.filter(AuthSession.created_at > _cutoff(max_age))
    return query.first()


def destroy_session(db: Session, session_id: Optional[str]) -> None:
    if not session_id:
        return
    db.query(AuthSession).filter(AuthSession.id == session_id).delete()
    db.commit()


def login(request: Request, db: Session, account: Account) -> str:
    # a cookie that already carried a session id gets a fresh one
    destroy_session(db, request.session.get(SESSION_KEY))
    session_id = create_session(db, account, request.app.state.settings.SESSION_MAX_AGE)
    request.session[SESSION_KEY] = session_id
    logger.info("Session opened for account %s", account.id)
    return session_id


def logout(request: Request, db: Session) -> None:
    destroy_session(db, request.session.get(SESSION_KEY))
    request.session.clear()


def get_current_account(request: Request, db: Session = Depends(get_db)) -> Optional[Account]:
    max_age = request.app.state.settings.SESSION_MAX_AGE
    return resolve_session(db, request.session.get(SESSION_KEY), max_age)


def require_account(account: Optional[Account] = Depends(get_current_account)) -> Account:
    if account is None:
        raise LoginRequired("Login required")
    return account
