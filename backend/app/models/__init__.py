# Ontology Models
from app.models.ontology import (
    User, Hotel, HotelRoom, Booking,
    AccountState, UserRole, OwnerRequestStatus, RoomType, BookingStatus, PaymentStatus
)

__all__ = [
    'User', 'Hotel', 'HotelRoom', 'Booking',
    'AccountState', 'UserRole', 'OwnerRequestStatus', 'RoomType', 'BookingStatus', 'PaymentStatus'
]
