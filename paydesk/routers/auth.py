import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from pydantic import ValidationError as SchemaError
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from paydesk.database import get_db
from paydesk.errors import AuthError, NotFoundError, ValidationError
from paydesk.models.account import Account
from paydesk.schemas.account import RegisterIn, normalize_email
from paydesk.schemas.password_reset import ForgotPasswordIn, ResetPasswordIn
from paydesk.templating import render
from paydesk.utils import auth
from paydesk.utils.hashing import dummy_verify, hash_password, verify_password
from paydesk.utils.mailer import send_reset_email
from paydesk.utils.password_reset import issue_reset_token, redeem_reset_token

logger = logging.getLogger("paydesk.auth")

router = APIRouter(tags=["Auth"])

DUPLICATE_ACCOUNT = "User already exists with that email, username, or phone number"


def _identity_taken(db: Session, data: RegisterIn) -> bool:
    return db.query(Account.id).filter(
        or_(
            Account.email == data.email,
            Account.username == data.username,
            Account.phone_number == data.phone_number,
        )
    ).first() is not None


# Registration
@router.get("/register")
def register_page(request: Request):
    return render(request, "register.html")


@router.post("/register")
def register(
    username: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    phone_number: str = Form(..., alias="phoneNumber"),
    db: Session = Depends(get_db),
):
    try:
        data = RegisterIn(
            username=username.strip(),
            email=email.strip(),
            password=password,
            phone_number=phone_number.strip(),
        )
    except SchemaError:
        raise ValidationError("Invalid registration details")

    if _identity_taken(db, data):
        logger.info("Registration rejected, identity already taken: %s", data.username)
        raise ValidationError(DUPLICATE_ACCOUNT)

    account = Account(
        username=data.username,
        email=data.email,
        phone_number=data.phone_number,
        password_hash=hash_password(data.password),
    )
    db.add(account)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against a concurrent registration
        db.rollback()
        raise ValidationError(DUPLICATE_ACCOUNT)

    logger.info("Account registered: %s (id=%s)", account.username, account.id)
    return RedirectResponse("/login", status_code=302)


# Login / logout
@router.get("/login")
def login_page(request: Request):
    return render(request, "login.html")


@router.post("/login")
def login(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    account = db.query(Account).filter(Account.email == normalize_email(email)).first()
    if not account:
        dummy_verify()
        logger.warning("Failed login attempt")
        raise AuthError("Invalid credentials")
    if not verify_password(password, account.password_hash):
        logger.warning("Failed login attempt for account %s", account.id)
        raise AuthError("Invalid credentials")

    auth.login(request, db, account)
    return RedirectResponse("/dashboard", status_code=302)


@router.get("/logout")
def logout(request: Request, db: Session = Depends(get_db)):
    auth.logout(request, db)
    return RedirectResponse("/", status_code=302)


# Forgotten password
@router.get("/forgot-password")
def forgot_password_page(request: Request):
    return render(request, "forgotten-password.html")


@router.post("/forgot-password")
def forgot_password(request: Request, email: str = Form(...), db: Session = Depends(get_db)):
    try:
        body = ForgotPasswordIn(email=normalize_email(email))
    except SchemaError:
        raise ValidationError("Email is required")

    account = db.query(Account).filter(Account.email == body.email).first()
    if not account:
        raise NotFoundError("User not found")

    settings = request.app.state.settings
    raw_token = issue_reset_token(db, account, settings.RESET_TOKEN_EXPIRE_MINUTES)

    query = urlencode({"token": raw_token})
    reset_link = f"{settings.PUBLIC_BASE_URL.rstrip('/')}/reset-password?{query}"
    # DependencyError -> 500 "Error sending email"; the token stays issued
    send_reset_email(request.app.state.mailer, account.email, reset_link)

    return PlainTextResponse("Password reset link sent to your email")


@router.get("/reset-password")
def reset_password_page(request: Request, token: str = Query("")):
    return render(request, "reset-password.html", token=token)


@router.post("/reset-password")
def reset_password(
    password: str = Form(...),
    confirm_password: str = Form(..., alias="confirmPassword"),
    token: str = Form(""),
    db: Session = Depends(get_db),
):
    body = ResetPasswordIn(token=token, password=password, confirm_password=confirm_password)
    if not body.passwords_match():
        raise ValidationError("Passwords do not match")

    redeem_reset_token(db, body.token, body.password)
    return PlainTextResponse("Password has been successfully reset.")
