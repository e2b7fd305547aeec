"""
Pydantic 模式定义
用于 API 请求/响应验证

Python 侧使用 snake_case，JSON 侧统一为 camelCase（roomType、checkIn、ownerRequest ...）
"""
from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from app.models.ontology import (
    UserRole, OwnerRequestStatus, RoomType, BookingStatus, PaymentStatus
)


class CamelModel(BaseModel):
    """camelCase 别名基类，同时接受 snake_case 字段名"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class MessageResponse(CamelModel):
    message: str


# ============== 用户 / 认证 Schemas ==============

class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=30)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("姓名不能为空")
        return v


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    profile_photo: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("姓名不能为空")
        return v


class OwnerRequestInfo(CamelModel):
    requested: bool = True
    requested_at: Optional[datetime] = None
    status: OwnerRequestStatus
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    rejection_reason: Optional[str] = None


class UserSummary(CamelModel):
    id: int
    name: str
    email: str
    role: UserRole


class UserResponse(UserSummary):
    phone: Optional[str] = None
    profile_photo: Optional[str] = None
    owner_request: Optional[OwnerRequestInfo] = None
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    token: str
    user: UserSummary


class ProfileResponse(CamelModel):
    message: str
    user: UserResponse


# ============== 业主申请 Schemas ==============

class OwnerRequestSubmitted(CamelModel):
    message: str
    status: OwnerRequestStatus
    requested_at: datetime


class OwnerRequestUser(UserSummary):
    owner_request: Optional[OwnerRequestInfo] = None


class OwnerRequestList(CamelModel):
    requests: List[OwnerRequestUser]
    pagination: Pagination


class OwnerRequestReview(CamelModel):
    message: str
    user: OwnerRequestUser


class RejectOwnerRequest(CamelModel):
    # 长度与非空在服务层校验，保证失败时不改变状态
    rejection_reason: Optional[str] = None


class MyOwnerRequest(CamelModel):
    role: UserRole
    owner_request: Optional[OwnerRequestInfo] = None


# ============== 酒店 Schemas ==============

class Address(CamelModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)


class GeoLocation(CamelModel):
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class HotelImage(CamelModel):
    url: str = Field(..., min_length=1)
    alt: Optional[str] = None


class HotelPolicies(CamelModel):
    check_in: str = "14:00"
    check_out: str = "11:00"
    cancellation: Optional[str] = None


class HotelContact(CamelModel):
    phone: Optional[str] = None
    email: Optional[str] = None


class RoomSchema(CamelModel):
    type: RoomType
    price: Decimal = Field(..., ge=0)
    available: int = Field(..., ge=0)
    max_guests: int = Field(..., ge=1)
    amenities: List[str] = []


def _unique_room_types(rooms: Optional[List[RoomSchema]]) -> Optional[List[RoomSchema]]:
    if rooms is not None:
        types = [r.type for r in rooms]
        if len(types) != len(set(types)):
            raise ValueError("同一酒店的房型不能重复")
    return rooms


class HotelCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    address: Address
    location: Optional[GeoLocation] = None
    images: List[HotelImage] = []
    amenities: List[str] = []
    rooms: List[RoomSchema] = []
    policies: HotelPolicies = Field(default_factory=HotelPolicies)
    contact: HotelContact = Field(default_factory=HotelContact)

    @field_validator("rooms")
    @classmethod
    def check_rooms(cls, v: List[RoomSchema]) -> List[RoomSchema]:
        return _unique_room_types(v)


class HotelUpdate(CamelModel):
    """部分更新；owner 不可修改，rooms 传入时整体替换"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    address: Optional[Address] = None
    location: Optional[GeoLocation] = None
    images: Optional[List[HotelImage]] = None
    amenities: Optional[List[str]] = None
    rooms: Optional[List[RoomSchema]] = None
    policies: Optional[HotelPolicies] = None
    contact: Optional[HotelContact] = None
    is_active: Optional[bool] = None

    @field_validator("rooms")
    @classmethod
    def check_rooms(cls, v: Optional[List[RoomSchema]]) -> Optional[List[RoomSchema]]:
        return _unique_room_types(v)


class HotelResponse(CamelModel):
    id: int
    name: str
    description: str
    owner_id: int
    address: Address
    location: Optional[GeoLocation] = None
    images: List[HotelImage] = []
    rating: float = 0
    review_count: int = 0
    amenities: List[str] = []
    rooms: List[RoomSchema] = []
    policies: Optional[HotelPolicies] = None
    contact: Optional[HotelContact] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class HotelSummary(CamelModel):
    id: int
    name: str
    address: Address
    images: List[HotelImage] = []
    rating: float = 0


class HotelPagination(CamelModel):
    current_page: int
    total_pages: int
    total_hotels: int
    limit: int


class HotelPage(CamelModel):
    hotels: List[HotelResponse]
    pagination: HotelPagination


class HotelStatusToggled(CamelModel):
    message: str
    is_active: bool


# ============== 预订 Schemas ==============

class GuestCount(CamelModel):
    adults: int = Field(..., ge=1)
    children: int = Field(default=0, ge=0)


class GuestDetails(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=30)


class BookingCreate(CamelModel):
    hotel: int
    room_type: str = Field(..., min_length=1)
    check_in: datetime
    check_out: datetime
    guests: GuestCount
    rooms: int = Field(..., ge=1)
    guest_details: GuestDetails
    special_requests: Optional[str] = Field(None, max_length=2000)

    @field_validator("check_in", "check_out")
    @classmethod
    def to_naive_utc(cls, v: datetime) -> datetime:
        """带时区的时间统一转为 naive UTC"""
        if v.tzinfo is not None:
            v = v.astimezone(UTC).replace(tzinfo=None)
        return v


class BookingResponse(CamelModel):
    id: int
    user_id: int
    hotel: HotelSummary
    room_type: RoomType
    check_in: datetime
    check_out: datetime
    nights: int
    guests: GuestCount
    rooms: int
    total_price: Decimal
    guest_details: GuestDetails
    special_requests: Optional[str] = None
    status: BookingStatus
    payment_status: PaymentStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookingDetail(BookingResponse):
    """预订详情：完整酒店信息与预订人"""
    hotel: HotelResponse
    user: UserSummary


class BookingCancelled(CamelModel):
    message: str
    booking: BookingResponse
