"""
初始化数据脚本
创建：演示账号、示例酒店（含房型与库存）

默认账号（密码均为 123456）：
  admin@stayfinder.dev     管理员
  owner@stayfinder.dev     已审核业主（示例酒店的所有者）
  guest@stayfinder.dev     普通用户
"""
import sys
sys.path.insert(0, '.')

import logging
from app.config import settings
from app.database import SessionLocal, init_db
from app.logging_config import setup_logging
from app.models.ontology import User, AccountState, Hotel, utcnow
from app.models.schemas import HotelCreate
from app.security.auth import get_password_hash
from app.services.hotel_service import HotelService

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "123456"

DEMO_USERS = [
    ("系统管理员", "admin@stayfinder.dev", AccountState.ADMIN),
    ("演示业主", "owner@stayfinder.dev", AccountState.APPROVED_OWNER),
    ("演示用户", "guest@stayfinder.dev", AccountState.GUEST),
]


def _hotel(name, description, street, city, state, zip_code, country, lat, lng, image,
           rating, review_count, amenities, rooms, check_in="14:00", phone=None, email=None):
    return {
        "data": {
            "name": name,
            "description": description,
            "address": {
                "street": street, "city": city, "state": state,
                "zipCode": zip_code, "country": country,
            },
            "location": {"latitude": lat, "longitude": lng},
            "images": [{"url": image, "alt": name}],
            "amenities": amenities,
            "rooms": rooms,
            "policies": {"checkIn": check_in, "checkOut": "11:00", "cancellation": "Free cancellation"},
            "contact": {"phone": phone, "email": email},
        },
        "rating": rating,
        "review_count": review_count,
    }


def _room(room_type, price, available, max_guests):
    return {"type": room_type, "price": price, "available": available,
            "maxGuests": max_guests, "amenities": ["AC", "TV"]}


SAMPLE_HOTELS = [
    _hotel("Saigon Riverside Hotel", "Modern hotel on the riverbank in Ho Chi Minh City, Vietnam.",
           "1 Nguyen Hue Blvd", "Ho Chi Minh", "Ho Chi Minh", "700000", "Vietnam", 10.7769, 106.7009,
           "https://images.unsplash.com/photo-1583417319070-4a69db38a482?w=800",
           4.2, 120, ["WiFi", "Parking", "Restaurant"], [_room("Deluxe", 3500, 10, 2)],
           phone="+84-28-12345678", email="info@saigonriverside.com"),
    _hotel("Paris Central Hotel", "Chic hotel in the heart of Paris, France.",
           "12 Rue de Rivoli", "Paris", "Île-de-France", "75001", "France", 48.8566, 2.3522,
           "https://images.unsplash.com/photo-1502602898657-3e91760cbb34?w=800",
           4.6, 210, ["WiFi", "Parking", "Restaurant"], [_room("Double", 6000, 8, 2)],
           check_in="15:00", phone="+33-1-23456789", email="info@pariscentral.com"),
    _hotel("Krabi Beach Resort", "Tropical beach resort in Krabi, Thailand.",
           "Ao Nang Beach", "Krabi", "Krabi", "81000", "Thailand", 8.0632, 98.9063,
           "https://images.unsplash.com/photo-1552465011-b4e21bf6e79a?w=800",
           4.4, 88, ["WiFi", "Pool", "Restaurant"], [_room("Suite", 7000, 6, 3)],
           check_in="13:00", phone="+66-75-123456", email="info@krabibeach.com"),
    _hotel("Maldives Lagoon Villa", "Luxury villa on the water in the Maldives.",
           "Lagoon Road", "Maldives", "Malé", "20000", "Maldives", 3.2028, 73.2207,
           "https://images.unsplash.com/photo-1512343879784-a960bf40e7f2?w=800",
           4.9, 340, ["WiFi", "Pool", "Spa"], [_room("Villa", 15000, 3, 2)],
           phone="+960-1234567", email="info@maldiveslagoon.com"),
    _hotel("Udaipur Lake Palace", "Palatial hotel on the lake in Udaipur, India.",
           "Lake Pichola", "Udaipur", "Rajasthan", "313001", "India", 24.5854, 73.7125,
           "https://images.unsplash.com/photo-1578662996442-48f60103fc96?w=800",
           4.7, 160, ["WiFi", "Restaurant", "Spa"], [_room("Deluxe", 9000, 5, 2)],
           phone="+91-294-1234567", email="info@udaipurlakepalace.com"),
    _hotel("Grand Plaza Hotel", "Business and leisure hotel in central Mumbai, India.",
           "Marine Drive", "Mumbai", "Maharashtra", "400020", "India", 18.9440, 72.8235,
           "https://images.unsplash.com/photo-1566073771259-6a8506099945?w=800",
           4.5, 256, ["WiFi", "Pool", "Gym", "Restaurant", "Parking"],
           [_room("Single", 2500, 12, 1), _room("Double", 4000, 10, 2), _room("Suite", 8000, 4, 4)],
           phone="+91-22-12345678", email="info@grandplaza.com"),
]


def init_users(db) -> User:
    """创建演示账号，返回演示业主"""
    owner = None
    for name, email, state in DEMO_USERS:
        user = db.query(User).filter(User.email == email).first()
        if not user:
            user = User(
                name=name,
                email=email,
                password_hash=get_password_hash(DEFAULT_PASSWORD),
                account_state=state,
            )
            if state == AccountState.APPROVED_OWNER:
                user.owner_requested_at = utcnow()
                user.owner_reviewed_at = utcnow()
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info(f"Created user {email} ({state.value})")
        if state == AccountState.APPROVED_OWNER:
            owner = user
    return owner


def init_hotels(db, owner: User) -> int:
    """创建示例酒店（按名称去重）"""
    service = HotelService(db)
    created = 0
    for sample in SAMPLE_HOTELS:
        data = HotelCreate.model_validate(sample["data"])
        if db.query(Hotel).filter(Hotel.name == data.name).first():
            continue
        hotel = service.create_hotel(data, owner)
        hotel.rating = sample["rating"]
        hotel.review_count = sample["review_count"]
        db.commit()
        created += 1
    return created


def main():
    setup_logging(settings.LOG_LEVEL)
    init_db()
    db = SessionLocal()
    try:
        owner = init_users(db)
        created = init_hotels(db, owner)
        logger.info(f"Seed finished: {created} hotels created")
    finally:
        db.close()


if __name__ == "__main__":
    main()
