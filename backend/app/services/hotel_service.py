"""
酒店服务 - 本体操作层
管理 Hotel 对象及其内嵌房型；公开查询只返回 is_active 的酒店
"""
import json
import logging
import math
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.orm import Session
from app.exceptions import NotFoundError
from app.models.ontology import Hotel, HotelRoom, User
from app.models.schemas import HotelCreate, HotelUpdate, HotelResponse, RoomSchema
from app.security.auth import ensure_owner_or_admin

logger = logging.getLogger(__name__)

SORT_RATING = "rating"
SORT_PRICE_LOW = "priceLow"
SORT_PRICE_HIGH = "priceHigh"
SORT_NAME = "name"
SORT_OPTIONS = (SORT_RATING, SORT_PRICE_LOW, SORT_PRICE_HIGH, SORT_NAME)

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"
STATUS_ALL = "all"


def filter_rooms_by_price(hotels: List[HotelResponse], min_price: Optional[Decimal],
                          max_price: Optional[Decimal]) -> List[HotelResponse]:
    """按价格区间过滤每家酒店的房型，去掉过滤后没有房型的酒店"""
    if min_price is None and max_price is None:
        return hotels

    result = []
    for hotel in hotels:
        rooms = [
            r for r in hotel.rooms
            if (min_price is None or r.price >= min_price)
            and (max_price is None or r.price <= max_price)
        ]
        if rooms:
            result.append(hotel.model_copy(update={"rooms": rooms}))
    return result


class HotelService:
    """酒店服务"""

    def __init__(self, db: Session):
        self.db = db

    # ---------- 查询 ----------

    def get_hotel(self, hotel_id: int) -> Optional[Hotel]:
        """获取酒店（不区分上下架）"""
        return self.db.query(Hotel).filter(Hotel.id == hotel_id).first()

    def get_hotel_or_404(self, hotel_id: int) -> Hotel:
        hotel = self.get_hotel(hotel_id)
        if not hotel:
            raise NotFoundError("酒店不存在")
        return hotel

    def get_public_hotel(self, hotel_id: int) -> Hotel:
        """公开详情：下架酒店视为不存在"""
        hotel = self.get_hotel(hotel_id)
        if not hotel or not hotel.is_active:
            raise NotFoundError("酒店不存在")
        return hotel

    def list_cities(self) -> List[str]:
        """上架酒店所在城市（去重、排序）"""
        rows = self.db.query(Hotel.city).filter(Hotel.is_active == True).distinct().all()  # noqa: E712
        return sorted(row[0] for row in rows)

    def search_hotels(self, city: Optional[str] = None, search: Optional[str] = None,
                      min_rating: Optional[float] = None, amenities: Optional[List[str]] = None,
                      min_price: Optional[Decimal] = None, max_price: Optional[Decimal] = None,
                      sort_by: str = SORT_RATING, page: int = 1,
                      limit: int = 12) -> Tuple[List[HotelResponse], dict]:
        """
        公开检索

        价格区间在分页之后作用于当前页的房型，分页总数按价格过滤前统计。
        """
        query = self.db.query(Hotel).filter(Hotel.is_active == True)  # noqa: E712

        if city:
            query = query.filter(Hotel.city.ilike(f"%{city.strip()}%"))

        if search:
            # 任一关键词命中名称、描述或城市即可
            query = query.filter(or_(*[
                column.icontains(term, autoescape=True)
                for term in search.split()
                for column in (Hotel.name, Hotel.description, Hotel.city)
            ]))

        if min_rating is not None:
            query = query.filter(Hotel.rating >= min_rating)

        if amenities:
            query = query.filter(or_(*[self._has_amenity(a) for a in amenities]))

        total = query.count()
        hotels = (
            query.order_by(*self._sort_clauses(sort_by))
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        results = [HotelResponse.model_validate(h) for h in hotels]
        results = filter_rooms_by_price(results, min_price, max_price)

        pagination = {
            "current_page": page,
            "total_pages": math.ceil(total / limit) if limit else 0,
            "total_hotels": total,
            "limit": limit,
        }
        return results, pagination

    def _has_amenity(self, amenity: str):
        """
        amenities 列包含指定设施（精确、区分大小写）

        JSON 文本中查找带引号的元素；instr / strpos 不做通配、不忽略大小写。
        """
        amenities_text = cast(Hotel.amenities, String)
        needle = json.dumps(amenity)
        if self.db.get_bind().dialect.name == "postgresql":
            return func.strpos(amenities_text, needle) > 0
        return func.instr(amenities_text, needle) > 0

    def _sort_clauses(self, sort_by: str) -> list:
        if sort_by == SORT_PRICE_LOW:
            lowest = (
                select(func.min(HotelRoom.price))
                .where(HotelRoom.hotel_id == Hotel.id)
                .correlate(Hotel)
                .scalar_subquery()
            )
            return [lowest.asc(), Hotel.id.asc()]
        if sort_by == SORT_PRICE_HIGH:
            highest = (
                select(func.max(HotelRoom.price))
                .where(HotelRoom.hotel_id == Hotel.id)
                .correlate(Hotel)
                .scalar_subquery()
            )
            return [highest.desc(), Hotel.id.asc()]
        if sort_by == SORT_NAME:
            return [Hotel.name.asc(), Hotel.id.asc()]
        return [Hotel.rating.desc(), Hotel.review_count.desc(), Hotel.id.asc()]

    def get_owner_hotels(self, owner_id: int, status: Optional[str] = None,
                         page: int = 1, limit: int = 12) -> Tuple[List[Hotel], dict]:
        """业主自己的酒店（包含下架的）"""
        query = self.db.query(Hotel).filter(Hotel.owner_id == owner_id)
        if status == STATUS_ACTIVE:
            query = query.filter(Hotel.is_active == True)  # noqa: E712
        elif status == STATUS_INACTIVE:
            query = query.filter(Hotel.is_active == False)  # noqa: E712

        total = query.count()
        hotels = (
            query.order_by(Hotel.created_at.desc(), Hotel.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        pagination = {
            "current_page": page,
            "total_pages": math.ceil(total / limit) if limit else 0,
            "total_hotels": total,
            "limit": limit,
        }
        return hotels, pagination

    def get_hotels_by_owner(self, owner_id: int) -> List[Hotel]:
        """指定业主的全部酒店（管理员视图）"""
        if not self.db.query(User).filter(User.id == owner_id).first():
            raise NotFoundError("用户不存在")
        return (
            self.db.query(Hotel)
            .filter(Hotel.owner_id == owner_id)
            .order_by(Hotel.created_at.desc(), Hotel.id.desc())
            .all()
        )

    # ---------- 写操作 ----------

    def create_hotel(self, data: HotelCreate, owner: User) -> Hotel:
        """创建酒店，所有者为当前业主"""
        hotel = Hotel(
            name=data.name.strip(),
            description=data.description,
            owner_id=owner.id,
            is_active=True,
        )
        self._apply_address(hotel, data.address)
        hotel.location = data.location.model_dump() if data.location else None
        hotel.images = [img.model_dump() for img in data.images]
        hotel.amenities = list(data.amenities)
        hotel.policies = data.policies.model_dump()
        hotel.contact = data.contact.model_dump()
        hotel.rooms = [self._new_room(r) for r in data.rooms]

        self.db.add(hotel)
        self.db.commit()
        self.db.refresh(hotel)
        logger.info(f"Hotel {hotel.id} created by owner {owner.id}")
        return hotel

    def update_hotel(self, hotel_id: int, data: HotelUpdate, actor: User) -> Hotel:
        """更新酒店（所有者或管理员）；所有者不可变更"""
        hotel = self.get_hotel_or_404(hotel_id)
        ensure_owner_or_admin(actor, hotel.owner_id)

        update_data = data.model_dump(exclude_unset=True)

        for key in ("name", "description", "amenities", "is_active"):
            if key in update_data and update_data[key] is not None:
                setattr(hotel, key, update_data[key])
        if data.address is not None:
            self._apply_address(hotel, data.address)
        if "location" in update_data:
            hotel.location = data.location.model_dump() if data.location else None
        if data.images is not None:
            hotel.images = [img.model_dump() for img in data.images]
        if data.policies is not None:
            hotel.policies = data.policies.model_dump()
        if data.contact is not None:
            hotel.contact = data.contact.model_dump()
        if data.rooms is not None:
            self._sync_rooms(hotel, data.rooms)

        self.db.commit()
        self.db.refresh(hotel)
        logger.info(f"Hotel {hotel.id} updated by user {actor.id}")
        return hotel

    def delete_hotel(self, hotel_id: int, actor: User) -> None:
        """删除酒店（连同房型与预订）"""
        hotel = self.get_hotel_or_404(hotel_id)
        ensure_owner_or_admin(actor, hotel.owner_id)

        self.db.delete(hotel)
        self.db.commit()
        logger.info(f"Hotel {hotel_id} deleted by user {actor.id}")

    def toggle_status(self, hotel_id: int, actor: User) -> Hotel:
        """上架 / 下架切换"""
        hotel = self.get_hotel_or_404(hotel_id)
        ensure_owner_or_admin(actor, hotel.owner_id)

        hotel.is_active = not hotel.is_active
        self.db.commit()
        self.db.refresh(hotel)
        logger.info(f"Hotel {hotel.id} is_active -> {hotel.is_active} by user {actor.id}")
        return hotel

    # ---------- 内部方法 ----------

    @staticmethod
    def _apply_address(hotel: Hotel, address) -> None:
        hotel.street = address.street
        hotel.city = address.city.strip()
        hotel.state = address.state
        hotel.zip_code = address.zip_code
        hotel.country = address.country

    @staticmethod
    def _new_room(data: RoomSchema) -> HotelRoom:
        return HotelRoom(
            type=data.type,
            price=data.price,
            available=data.available,
            max_guests=data.max_guests,
            amenities=list(data.amenities),
        )

    def _sync_rooms(self, hotel: Hotel, rooms: List[RoomSchema]) -> None:
        """按房型对齐：已有房型原地更新，新房型追加，未出现的房型删除"""
        existing = {room.type: room for room in hotel.rooms}
        kept = []
        for data in rooms:
            room = existing.pop(data.type, None)
            if room is None:
                room = self._new_room(data)
            else:
                room.price = data.price
                room.available = data.available
                room.max_guests = data.max_guests
                room.amenities = list(data.amenities)
            kept.append(room)
        hotel.rooms = kept
