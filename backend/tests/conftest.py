"""
Pytest 配置和共享 fixtures
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENABLE_AVAILABILITY_SWEEP", "false")
os.environ.setdefault("ENABLE_EMAIL_NOTIFICATIONS", "false")

import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from guesthouse.database import Base, get_db
from guesthouse.models import entities
from guesthouse.models.entities import GuestHouse, Room, Bed, User, UserRole
from guesthouse.routers.deps import get_clock
from guesthouse.security.auth import create_access_token
from guesthouse.services.audit_service import AuditService
from guesthouse.services.booking_service import BookingService
from guesthouse.main import app
from guesthouse_core.engine.audit import AuditEngine
from guesthouse_core.security.actor import Actor, ActorRole

# 测试中的“今天”
TODAY = date(2024, 12, 1)


class FixedClock:
    """可调整的时钟"""

    def __init__(self, today: date = TODAY):
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture(scope="function")
def db_engine():
    """创建内存数据库引擎"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """创建数据库会话"""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db_session, clock):
    """创建测试客户端"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============== 服务 Fixtures ==============

@pytest.fixture
def published():
    """记录发布的事件"""
    return []


@pytest.fixture
def audit_engine():
    return AuditEngine()


@pytest.fixture
def booking_service(db_session, clock, published, audit_engine):
    return BookingService(
        db_session,
        clock=clock,
        event_publisher=published.append,
        audit_service=AuditService(audit_engine),
    )


# ============== 用户与操作人 Fixtures ==============

def _make_user(db, username, role=UserRole.USER, email=None):
    user = User(
        username=username,
        email=email or f"{username}@example.com",
        first_name=username.capitalize(),
        last_name="Tester",
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session):
    return _make_user(db_session, "admin", role=UserRole.ADMIN)


@pytest.fixture
def regular_user(db_session):
    return _make_user(db_session, "alice")


@pytest.fixture
def other_user(db_session):
    return _make_user(db_session, "bob")


@pytest.fixture
def admin(admin_user):
    return Actor(user_id=admin_user.id, username=admin_user.username, role=ActorRole.ADMIN)


@pytest.fixture
def user(regular_user):
    return Actor(user_id=regular_user.id, username=regular_user.username, role=ActorRole.USER)


@pytest.fixture
def other(other_user):
    return Actor(user_id=other_user.id, username=other_user.username, role=ActorRole.USER)


@pytest.fixture
def guest():
    return Actor.guest()


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {create_access_token(admin_user.id, admin_user.role)}"}


@pytest.fixture
def user_headers(regular_user):
    return {"Authorization": f"Bearer {create_access_token(regular_user.id, regular_user.role)}"}


@pytest.fixture
def other_headers(other_user):
    return {"Authorization": f"Bearer {create_access_token(other_user.id, other_user.role)}"}


# ============== 库存 Fixtures ==============

@pytest.fixture
def sample_guest_house(db_session):
    gh = GuestHouse(name="Hill View", location="Shimla")
    db_session.add(gh)
    db_session.commit()
    db_session.refresh(gh)
    return gh


@pytest.fixture
def sample_room(db_session, sample_guest_house):
    room = Room(guest_house_id=sample_guest_house.id, room_number="101")
    db_session.add(room)
    db_session.commit()
    db_session.refresh(room)
    return room


@pytest.fixture
def make_bed(db_session, sample_room):
    """床位工厂"""
    counter = {"n": 0}

    def _make(price=Decimal("100.00"), is_available=True, room=None):
        counter["n"] += 1
        bed = Bed(
            room_id=(room or sample_room).id,
            bed_number=f"B-{counter['n']:03d}",
            price_per_night=price,
            is_available=is_available,
            is_available_for_booking=True,
        )
        db_session.add(bed)
        db_session.commit()
        db_session.refresh(bed)
        return bed

    return _make


@pytest.fixture
def sample_bed(make_bed):
    """每晚 100 的床位"""
    return make_bed()
