import logging

from passlib.context import CryptContext

from paydesk.errors import CredentialError

logger = logging.getLogger("paydesk.credentials")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)

BCRYPT_MAX_BYTES = 72


def configure(rounds: int) -> None:
    pwd_context.update(bcrypt__rounds=rounds)


def _check_bcrypt_len(password: str):
    if not password:
        raise CredentialError("Password is required")
    if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise CredentialError("Password too long (bcrypt max 72 bytes)")


def hash_password(password: str) -> str:
    _check_bcrypt_len(password)
    try:
        return pwd_context.hash(password)
    except (TypeError, ValueError) as exc:
        raise CredentialError("Password could not be hashed") from exc


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    if len(plain_password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (TypeError, ValueError):
        # unrecognised or corrupt stored hash
        logger.warning("Stored password hash could not be parsed")
        return False


def dummy_verify() -> None:
    # spends the same time as a real check when the account does not exist
    pwd_context.dummy_verify()
