import pytest
from fastapi.testclient import TestClient

from app.auth.auth_utils import create_access_token, hash_password
from app.auth.google import GoogleIdentity, GoogleTokenError, GoogleUnavailableError
from app.config.settings import Settings
from app.enums import UserRole
from app.main import create_app
from app.models import Team, TeamMember, User
from app.utils.email_service import EmailDeliveryError

PASSWORD = "secret123"


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    async def send_otp(self, email, otp):
        if self.fail:
            raise EmailDeliveryError("smtp down")
        self.sent.append((email, otp))

    def last_otp(self, email):
        for address, otp in reversed(self.sent):
            if address == email:
                return otp
        return None


class FakeGoogleVerifier:
    configured = True

    def __init__(self):
        self.identities = {}
        self.unavailable = False

    def verify(self, token):
        if self.unavailable:
            raise GoogleUnavailableError("certs unreachable")
        if token not in self.identities:
            raise GoogleTokenError("bad token")
        return self.identities[token]

    def register(self, token, email, name="Google User", google_id=None):
        self.identities[token] = GoogleIdentity(
            google_id=google_id or f"g-{email}",
            email=email,
            name=name,
        )


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret",
        REFRESH_SECRET_KEY="test-refresh-secret",
        ADMIN_SECRET_KEY="admin-key",
        MANAGER_SECRET_KEY="manager-key",
        MAIL_SUPPRESS_SEND=True,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings):
    app = create_app(settings)
    app.state.mailer = FakeMailer()
    app.state.google_verifier = FakeGoogleVerifier()
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def mailer(app):
    return app.state.mailer


@pytest.fixture
def google(app):
    return app.state.google_verifier


@pytest.fixture
def db(app, client):
    session = app.state.database.session()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    def _make_user(email, role=UserRole.EMPLOYEE, name=None, verified=True, password=PASSWORD):
        user = User(
            email=email,
            name=name or email.split("@")[0].title(),
            role=role.value,
            password_hash=hash_password(password) if password else None,
            email_verified=verified,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_team(db):
    def _make_team(name, manager=None, members=()):
        team = Team(
            name=name,
            manager_id=manager.id if manager else None,
            member_links=[TeamMember(user_id=member.id) for member in members],
        )
        db.add(team)
        db.commit()
        db.refresh(team)
        return team
    return _make_team


@pytest.fixture
def auth_headers(settings):
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id, settings)}"}
    return _headers


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", UserRole.ADMIN, name="Alice Admin")


@pytest.fixture
def manager(make_user):
    return make_user("manager@example.com", UserRole.MANAGER, name="Mark Manager")


@pytest.fixture
def other_manager(make_user):
    return make_user("manager2@example.com", UserRole.MANAGER, name="Mona Manager")


@pytest.fixture
def employee(make_user):
    return make_user("emp@example.com", UserRole.EMPLOYEE, name="Eve Employee")


@pytest.fixture
def other_employee(make_user):
    return make_user("emp2@example.com", UserRole.EMPLOYEE, name="Bob Employee")
