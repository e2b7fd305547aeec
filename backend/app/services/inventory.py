"""
房量库存 - 条件更新

扣减和归还都以单条 UPDATE 完成，扣减带 available >= n 条件，
由数据库保证并发请求不会把库存扣成负数。调用方负责提交或回滚事务。
"""
import logging
from sqlalchemy import update
from sqlalchemy.orm import Session
from app.exceptions import InsufficientInventoryError
from app.models.ontology import HotelRoom

logger = logging.getLogger(__name__)


def reserve_rooms(db: Session, room_id: int, count: int) -> None:
    """扣减库存；库存不足（包括被并发请求抢先扣减）时抛出 InsufficientInventoryError"""
    result = db.execute(
        update(HotelRoom)
        .where(HotelRoom.id == room_id, HotelRoom.available >= count)
        .values(available=HotelRoom.available - count)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.warning(f"Inventory reserve refused: room {room_id} x{count}")
        raise InsufficientInventoryError("可预订房间数量不足")
    logger.info(f"Inventory reserved: room {room_id} -{count}")


def release_rooms(db: Session, room_id: int, count: int) -> None:
    """归还库存"""
    db.execute(
        update(HotelRoom)
        .where(HotelRoom.id == room_id)
        .values(available=HotelRoom.available + count)
        .execution_options(synchronize_session=False)
    )
    logger.info(f"Inventory released: room {room_id} +{count}")
