# Business Services
# 按模块路径导入，例如 from app.services.booking_service import BookingService
