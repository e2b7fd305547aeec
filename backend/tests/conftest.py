"""
Pytest 配置和共享 fixtures
"""
import os

# 应用模块在导入时按配置创建引擎，测试期间不落盘
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from datetime import timedelta
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from app.database import Base, get_db
from app.models import ontology  # noqa: F401
from app.models.ontology import User, AccountState, Hotel, HotelRoom, RoomType, utcnow
from app.security.auth import get_password_hash, create_access_token
from app.main import app

DEFAULT_PASSWORD = "123456"


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
def client(db_session):
    """创建测试客户端"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============== 用户相关 Fixtures ==============

def create_user(db, name, email, state=AccountState.GUEST, password=DEFAULT_PASSWORD):
    """创建用户（测试辅助）"""
    user = User(
        name=name,
        email=email,
        password_hash=get_password_hash(password),
        phone="13800000000",
        account_state=state,
    )
    if state in (AccountState.PENDING_OWNER, AccountState.APPROVED_OWNER, AccountState.REJECTED_OWNER):
        user.owner_requested_at = utcnow()
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_header(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def guest_user(db_session):
    """普通用户"""
    return create_user(db_session, "游客小王", "guest@example.com")


@pytest.fixture
def other_guest(db_session):
    """另一个普通用户"""
    return create_user(db_session, "游客小李", "other@example.com")


@pytest.fixture
def admin_user(db_session):
    """管理员"""
    return create_user(db_session, "管理员", "admin@example.com", AccountState.ADMIN)


@pytest.fixture
def owner_user(db_session):
    """已审核业主"""
    return create_user(db_session, "业主老张", "owner@example.com", AccountState.APPROVED_OWNER)


@pytest.fixture
def other_owner(db_session):
    """另一个已审核业主"""
    return create_user(db_session, "业主老陈", "owner2@example.com", AccountState.APPROVED_OWNER)


@pytest.fixture
def pending_user(db_session):
    """业主申请待审核的用户"""
    return create_user(db_session, "申请人", "pending@example.com", AccountState.PENDING_OWNER)


@pytest.fixture
def guest_headers(guest_user):
    return auth_header(guest_user)


@pytest.fixture
def other_guest_headers(other_guest):
    return auth_header(other_guest)


@pytest.fixture
def admin_headers(admin_user):
    return auth_header(admin_user)


@pytest.fixture
def owner_headers(owner_user):
    return auth_header(owner_user)


@pytest.fixture
def other_owner_headers(other_owner):
    return auth_header(other_owner)


@pytest.fixture
def pending_headers(pending_user):
    return auth_header(pending_user)


# ============== 酒店相关 Fixtures ==============

def create_hotel(db, owner, name="Goa Sands Resort", city="Goa", rating=4.5,
                 amenities=None, rooms=None, is_active=True):
    """创建酒店（测试辅助）；rooms 为 (房型, 单价, 可售数, 最大入住) 列表"""
    hotel = Hotel(
        name=name,
        description=f"{name} description",
        owner_id=owner.id,
        street="1 Beach Road",
        city=city,
        state="Goa",
        zip_code="403001",
        country="India",
        images=[],
        rating=rating,
        review_count=10,
        amenities=amenities if amenities is not None else ["WiFi", "Pool"],
        policies={"check_in": "14:00", "check_out": "11:00", "cancellation": None},
        contact={"phone": None, "email": None},
        is_active=is_active,
    )
    for room_type, price, available, max_guests in rooms or [(RoomType.DELUXE, 5000, 3, 2)]:
        hotel.rooms.append(HotelRoom(
            type=room_type,
            price=Decimal(str(price)),
            available=available,
            max_guests=max_guests,
            amenities=["AC"],
        ))
    db.add(hotel)
    db.commit()
    db.refresh(hotel)
    return hotel


@pytest.fixture
def sample_hotel(db_session, owner_user):
    """Deluxe 房型：单价 5000，可售 3 间，每间最多 2 人"""
    return create_hotel(db_session, owner_user)


def stay_dates(days_ahead=7, nights=3):
    """未来日期的入住 / 离店时间"""
    check_in = (utcnow() + timedelta(days=days_ahead)).replace(
        hour=14, minute=0, second=0, microsecond=0
    )
    return check_in, check_in + timedelta(days=nights)


def booking_payload(hotel_id, room_type="Deluxe", rooms=2, adults=2, children=0,
                    days_ahead=7, nights=3):
    check_in, check_out = stay_dates(days_ahead, nights)
    return {
        "hotel": hotel_id,
        "roomType": room_type,
        "checkIn": check_in.isoformat(),
        "checkOut": check_out.isoformat(),
        "guests": {"adults": adults, "children": children},
        "rooms": rooms,
        "guestDetails": {
            "firstName": "Wang",
            "lastName": "Xiao",
            "email": "guest@example.com",
            "phone": "13800000000",
        },
    }


@pytest.fixture
def make_user(db_session):
    """用户工厂"""
    def _make(name, email, state=AccountState.GUEST, password=DEFAULT_PASSWORD):
        return create_user(db_session, name, email, state, password)
    return _make


@pytest.fixture
def make_hotel(db_session, owner_user):
    """酒店工厂（默认所有者为 owner_user）"""
    def _make(owner=None, **kwargs):
        return create_hotel(db_session, owner or owner_user, **kwargs)
    return _make


@pytest.fixture
def booking_data():
    """预订请求体工厂"""
    return booking_payload


@pytest.fixture
def headers_for():
    """为任意用户生成认证头"""
    return auth_header
