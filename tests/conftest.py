"""Shared fixtures: an app per test on in-memory SQLite with fake mail and Paystack."""
import pytest
from fastapi.testclient import TestClient

from paydesk.config import Settings
from paydesk.database import Base, make_engine, make_session_factory
from paydesk.errors import DependencyError
from paydesk.factory import create_app
from paydesk.models.account import Account
from paydesk.utils import hashing
from paydesk.utils.paystack import PaymentResult

ALICE = {
    "username": "alice",
    "email": "a@x.com",
    "password": "Secret1",
    "phoneNumber": "+1000",
}


class FakeMailer:
    sender = "noreply@example.com"

    def __init__(self):
        self.sent = []
        self.fail = False

    def send_message(self, message):
        if self.fail:
            raise DependencyError("Error sending email")
        self.sent.append(message)


class FakePaystack:
    """Answers from ``results``; unknown references are unsuccessful."""

    def __init__(self):
        self.results = {}
        self.calls = []

    def succeed(self, reference, email, amount):
        self.results[reference] = PaymentResult(
            reference=reference, successful=True, amount=amount, email=email
        )

    def verify(self, reference):
        self.calls.append(reference)
        result = self.results.get(reference)
        if isinstance(result, Exception):
            raise result
        if result is None:
            return PaymentResult(reference=reference, successful=False)
        return result


@pytest.fixture(autouse=True)
def fast_hashing():
    hashing.configure(4)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        SESSION_SECRET="test-session-secret",
        DATABASE_URL="sqlite://",
        BCRYPT_ROUNDS=4,
        PUBLIC_BASE_URL="http://testserver",
        LOG_DIR=str(tmp_path / "logs"),
    )


@pytest.fixture
def app(settings):
    app = create_app(settings)
    app.state.mailer = FakeMailer()
    app.state.paystack = FakePaystack()
    return app


@pytest.fixture
def client(app):
    with TestClient(app, follow_redirects=False) as c:
        yield c


@pytest.fixture
def fetch_account(app):
    def _fetch(email):
        with app.state.SessionLocal() as db:
            return db.query(Account).filter(Account.email == email).first()
    return _fetch


@pytest.fixture
def registered(client):
    resp = client.post("/register", data=ALICE)
    assert resp.status_code == 302
    return dict(ALICE)


@pytest.fixture
def logged_in(client, registered):
    resp = client.post("/login", data={"email": registered["email"], "password": registered["password"]})
    assert resp.status_code == 302
    return registered


@pytest.fixture
def db():
    """A bare session for service-level tests, no HTTP app involved."""
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session = make_session_factory(engine)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def make_account(db):
    def _make(username="alice", email="a@x.com", phone_number="+1000", password="Secret1"):
        account = Account(
            username=username,
            email=email,
            phone_number=phone_number,
            password_hash=hashing.hash_password(password),
        )
        db.add(account)
        db.commit()
        return account
    return _make
