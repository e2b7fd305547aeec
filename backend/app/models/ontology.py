"""
本体对象定义 (Ontology Objects)
User / Hotel / HotelRoom / Booking

用户的角色和业主申请合并为单一的 account_state，
对外的 role 与 ownerRequest 均由它推导，不再单独存储。
"""
import math
from datetime import datetime, UTC
from enum import Enum
from typing import Optional
from sqlalchemy import (
    Column, Integer, String, Float, DateTime, ForeignKey, Text,
    Enum as SQLEnum, Boolean, Numeric, JSON, CheckConstraint, UniqueConstraint
)
from sqlalchemy.orm import relationship
from app.database import Base


def utcnow() -> datetime:
    """当前 UTC 时间（naive，与数据库列保持一致）"""
    return datetime.now(UTC).replace(tzinfo=None)


SECONDS_PER_NIGHT = 24 * 60 * 60


def count_nights(check_in: datetime, check_out: datetime) -> int:
    """计算入住晚数（不足一天按一晚计）"""
    return math.ceil((check_out - check_in).total_seconds() / SECONDS_PER_NIGHT)


# ============== 枚举定义 ==============

class AccountState(str, Enum):
    """账号状态（角色 + 业主申请的合并状态）"""
    GUEST = "guest"                    # 普通用户，无申请
    PENDING_OWNER = "pending_owner"    # 业主申请待审核
    APPROVED_OWNER = "approved_owner"  # 业主申请已通过
    REJECTED_OWNER = "rejected_owner"  # 业主申请被拒绝
    ADMIN = "admin"                    # 管理员（静态分配）


class UserRole(str, Enum):
    """对外展示的角色"""
    USER = "user"
    OWNER = "owner"
    ADMIN = "admin"


class OwnerRequestStatus(str, Enum):
    """业主申请状态"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RoomType(str, Enum):
    """房型"""
    SINGLE = "Single"
    DOUBLE = "Double"
    TWIN = "Twin"
    SUITE = "Suite"
    DELUXE = "Deluxe"
    VILLA = "Villa"


class BookingStatus(str, Enum):
    """预订状态"""
    CONFIRMED = "confirmed"    # 已确认
    CANCELLED = "cancelled"    # 已取消
    COMPLETED = "completed"    # 已完成


class PaymentStatus(str, Enum):
    """支付状态"""
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


_REQUEST_STATUS_BY_STATE = {
    AccountState.PENDING_OWNER: OwnerRequestStatus.PENDING,
    AccountState.APPROVED_OWNER: OwnerRequestStatus.APPROVED,
    AccountState.REJECTED_OWNER: OwnerRequestStatus.REJECTED,
}

ACCOUNT_STATE_BY_REQUEST_STATUS = {v: k for k, v in _REQUEST_STATUS_BY_STATE.items()}


# ============== 本体对象定义 ==============

class User(Base):
    """
    用户对象
    password_hash 永不出现在响应中
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(30))
    profile_photo = Column(String(500))

    account_state = Column(SQLEnum(AccountState), default=AccountState.GUEST, nullable=False, index=True)
    owner_requested_at = Column(DateTime)
    owner_reviewed_at = Column(DateTime)
    owner_reviewed_by = Column(Integer, ForeignKey("users.id"))
    owner_rejection_reason = Column(String(500))

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # 链接
    hotels = relationship("Hotel", back_populates="owner")
    bookings = relationship("Booking", back_populates="user")

    @property
    def role(self) -> UserRole:
        if self.account_state == AccountState.ADMIN:
            return UserRole.ADMIN
        if self.account_state == AccountState.APPROVED_OWNER:
            return UserRole.OWNER
        return UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.account_state == AccountState.ADMIN

    @property
    def is_approved_owner(self) -> bool:
        return self.account_state == AccountState.APPROVED_OWNER

    @property
    def owner_request_status(self) -> Optional[OwnerRequestStatus]:
        return _REQUEST_STATUS_BY_STATE.get(self.account_state)

    @property
    def owner_request(self) -> Optional[dict]:
        """业主申请记录（无申请时为 None）"""
        request_status = self.owner_request_status
        if request_status is None:
            return None
        return {
            "requested": True,
            "requested_at": self.owner_requested_at,
            "status": request_status,
            "reviewed_at": self.owner_reviewed_at,
            "reviewed_by": self.owner_reviewed_by,
            "rejection_reason": self.owner_rejection_reason,
        }


class Hotel(Base):
    """
    酒店对象
    is_active=False 时对公开接口隐藏，业主管理视图仍可见
    """
    __tablename__ = "hotels"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # 地址（展开存储，城市需要参与检索）
    street = Column(String(200), nullable=False)
    city = Column(String(100), nullable=False, index=True)
    state = Column(String(100), nullable=False)
    zip_code = Column(String(20), nullable=False)
    country = Column(String(100), nullable=False)

    location = Column(JSON)                          # {"latitude", "longitude"}
    images = Column(JSON, default=list)              # [{"url", "alt"}]
    rating = Column(Float, default=0, index=True)
    review_count = Column(Integer, default=0)
    amenities = Column(JSON, default=list)
    policies = Column(JSON, default=dict)            # {"check_in", "check_out", "cancellation"}
    contact = Column(JSON, default=dict)             # {"phone", "email"}
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # 链接
    owner = relationship("User", back_populates="hotels")
    rooms = relationship(
        "HotelRoom", back_populates="hotel",
        cascade="all, delete-orphan", order_by="HotelRoom.id"
    )
    bookings = relationship("Booking", back_populates="hotel", cascade="all, delete-orphan")

    @property
    def address(self) -> dict:
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
        }

    def find_room(self, room_type) -> Optional["HotelRoom"]:
        """按房型查找房间（不存在返回 None）"""
        for room in self.rooms:
            if room.type == room_type:
                return room
        return None


class HotelRoom(Base):
    """
    房型库存 - 内嵌于酒店，不单独对外寻址
    available 为实时可售数量，只通过条件更新修改
    """
    __tablename__ = "hotel_rooms"
    __table_args__ = (
        CheckConstraint("available >= 0", name="ck_hotel_rooms_available_non_negative"),
        UniqueConstraint("hotel_id", "type", name="uq_hotel_rooms_hotel_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SQLEnum(RoomType), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    available = Column(Integer, nullable=False, default=0)
    max_guests = Column(Integer, nullable=False, default=1)
    amenities = Column(JSON, default=list)

    hotel = relationship("Hotel", back_populates="rooms")


class Booking(Base):
    """
    预订对象
    total_price 在创建时计算一次，之后不再重算
    """
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False, index=True)
    room_type = Column(SQLEnum(RoomType), nullable=False)
    check_in = Column(DateTime, nullable=False)
    check_out = Column(DateTime, nullable=False)
    adults = Column(Integer, nullable=False, default=1)
    children = Column(Integer, nullable=False, default=0)
    rooms = Column(Integer, nullable=False, default=1)
    total_price = Column(Numeric(12, 2), nullable=False)
    guest_details = Column(JSON, nullable=False)     # {"first_name", "last_name", "email", "phone"}
    special_requests = Column(Text)
    status = Column(SQLEnum(BookingStatus), default=BookingStatus.CONFIRMED, nullable=False)
    payment_status = Column(SQLEnum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)

    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # 链接
    user = relationship("User", back_populates="bookings")
    hotel = relationship("Hotel", back_populates="bookings")

    @property
    def guests(self) -> dict:
        return {"adults": self.adults, "children": self.children}

    @property
    def nights(self) -> int:
        return count_nights(self.check_in, self.check_out)
