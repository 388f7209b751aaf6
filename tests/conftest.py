import itertools
import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret')

from telehealth.core.errors import VideoProvisioningError  # noqa: E402
from telehealth.database import Base  # noqa: E402
from telehealth.models.appointment import Appointment  # noqa: E402,F401
from telehealth.models.availability import Availability  # noqa: E402,F401
from telehealth.models.user import ROLE_DOCTOR, ROLE_PATIENT, VERIFICATION_VERIFIED, User  # noqa: E402


class FakeVideoProvisioner:
    def __init__(self, fail_sessions: bool = False, fail_tokens: bool = False):
        self.fail_sessions = fail_sessions
        self.fail_tokens = fail_tokens
        self.sessions: list[str] = []
        self.token_requests: list[dict] = []

    def create_session(self, media_mode: str = 'routed') -> str:
        if self.fail_sessions:
            raise VideoProvisioningError('provider down')
        session_id = f'session-{len(self.sessions) + 1}'
        self.sessions.append(session_id)
        return session_id

    def generate_token(self, session_id: str, role: str, expire_time: int, data: str) -> str:
        if self.fail_tokens:
            raise VideoProvisioningError('provider down')
        self.token_requests.append(
            {'session_id': session_id, 'role': role, 'expire_time': expire_time, 'data': data}
        )
        return f'token-{len(self.token_requests)}'


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(db_engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make_user(role: str = ROLE_PATIENT, credits: int = 0, **fields) -> User:
        number = next(counter)
        fields.setdefault('auth_subject', f'user_{number}')
        fields.setdefault('email', f'user{number}@example.com')
        fields.setdefault('name', f'User {number}')
        user = User(role=role, credits=credits, **fields)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def patient(make_user) -> User:
    return make_user(ROLE_PATIENT, credits=2, name='Pat Patient')


@pytest.fixture
def doctor(make_user) -> User:
    return make_user(
        ROLE_DOCTOR,
        name='Dana Doctor',
        specialty='Cardiology',
        verification_status=VERIFICATION_VERIFIED,
        timezone='UTC',
    )


@pytest.fixture
def video() -> FakeVideoProvisioner:
    return FakeVideoProvisioner()


@pytest.fixture
def balance_of(db):
    def _balance_of(user_id: int) -> int:
        return db.query(User.credits).filter(User.id == user_id).scalar()

    return _balance_of


@pytest.fixture
def make_video():
    return FakeVideoProvisioner
