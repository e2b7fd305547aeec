# API Routers
from app.routers import auth, hotels, bookings

__all__ = ['auth', 'hotels', 'bookings']
