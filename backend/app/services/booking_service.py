"""
预订服务 - 本体操作层
管理 Booking 对象，并与酒店房量库存在同一事务中同步变更
"""
import logging
from typing import List
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.exceptions import (
    AppError, AuthorizationError, CapacityExceededError, ConflictError,
    InsufficientInventoryError, InvalidDateError, InvalidRoomError, NotFoundError
)
from app.models.ontology import (
    Booking, BookingStatus, Hotel, HotelRoom, PaymentStatus, User, utcnow
)
from app.models.schemas import BookingCreate
from app.services.inventory import reserve_rooms, release_rooms
from app.services.pricing import calculate_total_price

logger = logging.getLogger(__name__)


class BookingService:
    """预订服务"""

    def __init__(self, db: Session):
        self.db = db

    def get_user_bookings(self, user_id: int) -> List[Booking]:
        """获取用户自己的预订（最新在前）"""
        return (
            self.db.query(Booking)
            .filter(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .all()
        )

    def get_booking(self, booking_id: int, actor: User) -> Booking:
        """获取单个预订（本人或管理员）"""
        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError("预订不存在")
        if booking.user_id != actor.id and not actor.is_admin:
            raise AuthorizationError("无权查看该预订")
        return booking

    def create_booking(self, data: BookingCreate, user: User) -> Booking:
        """
        创建预订

        校验顺序（第一个失败即返回）：入住日期、离店日期、酒店、房型、库存、容量。
        预订写入与库存扣减在同一事务中提交。
        """
        check_in, check_out = data.check_in, data.check_out

        # 入住时间为 naive UTC，按 UTC 日期比较
        if check_in.date() < utcnow().date():
            raise InvalidDateError("入住日期不能早于今天")
        if check_out <= check_in:
            raise InvalidDateError("离店日期必须晚于入住日期")

        hotel = self.db.query(Hotel).filter(Hotel.id == data.hotel).first()
        if not hotel or not hotel.is_active:
            raise NotFoundError("酒店不存在")

        room = hotel.find_room(data.room_type)
        if room is None:
            raise InvalidRoomError("该酒店没有此房型")

        if room.available < data.rooms:
            raise InsufficientInventoryError("可预订房间数量不足")

        guest_total = data.guests.adults + data.guests.children
        if room.max_guests * data.rooms < guest_total:
            raise CapacityExceededError("入住人数超过房间容量")

        booking = Booking(
            user_id=user.id,
            hotel_id=hotel.id,
            room_type=room.type,
            check_in=check_in,
            check_out=check_out,
            adults=data.guests.adults,
            children=data.guests.children,
            rooms=data.rooms,
            total_price=calculate_total_price(room.price, data.rooms, check_in, check_out),
            guest_details=data.guest_details.model_dump(),
            special_requests=data.special_requests,
            status=BookingStatus.CONFIRMED,
            payment_status=PaymentStatus.PENDING,
        )

        try:
            reserve_rooms(self.db, room.id, data.rooms)
            self.db.add(booking)
            self.db.commit()
        except (AppError, SQLAlchemyError):
            self.db.rollback()
            raise

        self.db.refresh(booking)
        logger.info(
            f"Booking {booking.id} created: user {user.id}, hotel {hotel.id}, "
            f"{booking.room_type.value} x{booking.rooms}, total {booking.total_price}"
        )
        return booking

    def cancel_booking(self, booking_id: int, actor: User) -> Booking:
        """
        取消预订（仅预订人本人，管理员也不能代为取消）

        状态更新带 status != cancelled 条件，同一预订不会被重复取消、重复归还库存。
        """
        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError("预订不存在")
        if booking.user_id != actor.id:
            raise AuthorizationError("只能取消自己的预订")
        if booking.status == BookingStatus.CANCELLED:
            raise ConflictError("该预订已取消")

        try:
            result = self.db.execute(
                update(Booking)
                .where(Booking.id == booking.id, Booking.status != BookingStatus.CANCELLED)
                .values(
                    status=BookingStatus.CANCELLED,
                    payment_status=PaymentStatus.REFUNDED,
                    updated_at=utcnow(),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise ConflictError("该预订已取消")

            room = (
                self.db.query(HotelRoom)
                .filter(HotelRoom.hotel_id == booking.hotel_id, HotelRoom.type == booking.room_type)
                .first()
            )
            if room is not None:
                release_rooms(self.db, room.id, booking.rooms)
            else:
                logger.warning(
                    f"Booking {booking.id} cancelled but room type {booking.room_type.value} "
                    f"no longer exists on hotel {booking.hotel_id}; inventory not restored"
                )
            self.db.commit()
        except (AppError, SQLAlchemyError):
            self.db.rollback()
            raise

        self.db.refresh(booking)
        logger.info(f"Booking {booking.id} cancelled by user {actor.id}")
        return booking
