"""
NGO portal - test configuration and fixtures
"""
import os
import tempfile
from datetime import datetime, timedelta
from typing import AsyncGenerator, Generator

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from faker import Faker

# Set testing environment before the app reads it
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['UPLOAD_ROOT'] = tempfile.mkdtemp(prefix='ngo-portal-uploads-')

from ngo_portal.main import app
from ngo_portal import approval
from ngo_portal.database import Base, get_db
from ngo_portal.cryptography import encrypt_password
from ngo_portal.models.user_model import User
from ngo_portal.models.event_model import Event
from ngo_portal.models.program_model import Program
from ngo_portal.security import create_access_token

fake = Faker()

DEFAULT_PASSWORD = 'testpassword123'

# One shared in-memory database; StaticPool hands every session the same connection
test_engine = create_engine(
    'sqlite://',
    connect_args={'check_same_thread': False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=test_engine, autocommit=False, autoflush=False)


@pytest.fixture(scope='function')
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
async def client(db_session: Session) -> AsyncGenerator[AsyncClient, None]:
    """Test client; each request gets its own session like in production"""
    # async so sessions open and close on the event loop, never in the threadpool
    async def override_get_db():
        db = TestSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def ws_client(db_session: Session) -> Generator[TestClient, None, None]:
    """Sync client for websocket routes, sharing the test session"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: Session):
    """Factory for stored accounts; company/ngo accounts start pending"""
    def _make(role='member', password=DEFAULT_PASSWORD, approval_status=None, rejection_reason=None, **fields):
        user = User(
            name=fields.pop('name', fake.name()),
            email=fields.pop('email', fake.unique.email()).lower(),
            password=encrypt_password(password),
            role=role,
            phone=fields.pop('phone', fake.msisdn()),
            documents=fields.pop('documents', []),
            **fields
        )
        state = approval.initial_state(role)
        if state is not None and approval_status:
            state = approval.ApprovalState(approval.ApprovalStatus(approval_status), rejection_reason)
        approval.write_state(user, state)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user(role='admin', name='Admin User')


@pytest.fixture
def member_user(make_user) -> User:
    return make_user(role='member', name='Jane', email='jane@example.org')


@pytest.fixture
def pending_company(make_user) -> User:
    return make_user(role='company', name='Acme Co', email='acme@example.com', company='Acme Co')


@pytest.fixture
def approved_company(make_user) -> User:
    return make_user(role='company', name='Globex', approval_status='approved')


@pytest.fixture
def pending_ngo(make_user) -> User:
    return make_user(role='ngo', name='Helping Hands', documents=['/uploads/documents/cert.pdf'])


def auth_headers_for(user: User) -> dict:
    return {'Authorization': f'Bearer {create_access_token(user)}'}


@pytest.fixture
def headers_for():
    return auth_headers_for


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return auth_headers_for(admin_user)


@pytest.fixture
def member_headers(member_user: User) -> dict:
    return auth_headers_for(member_user)


@pytest.fixture
def make_event(db_session: Session):
    def _make(**fields):
        event = Event(
            title=fields.pop('title', 'Community Fair'),
            description=fields.pop('description', fake.sentence()),
            date=fields.pop('date', datetime(2026, 11, 14)),
            day=fields.pop('day', 'Saturday'),
            time=fields.pop('time', '10:00 AM'),
            **fields
        )
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event
    return _make


@pytest.fixture
def make_program(db_session: Session):
    def _make(**fields):
        start = fields.pop('starting_date', datetime.utcnow() + timedelta(days=3))
        program = Program(
            title=fields.pop('title', 'Digital Skills'),
            description=fields.pop('description', fake.sentence()),
            starting_date=start,
            ending_date=fields.pop('ending_date', start + timedelta(days=30)),
            day=fields.pop('day', 'Monday'),
            time=fields.pop('time', '06:00 PM'),
            **fields
        )
        db_session.add(program)
        db_session.commit()
        db_session.refresh(program)
        return program
    return _make
