"""
预订路由
"""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.ontology import User
from app.models.schemas import BookingCreate, BookingResponse, BookingDetail, BookingCancelled
from app.services.booking_service import BookingService
from app.security.auth import get_current_user

router = APIRouter(prefix="/bookings", tags=["预订"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """创建预订（扣减房量）"""
    return BookingService(db).create_booking(data, current_user)


@router.get("", response_model=List[BookingResponse])
def list_my_bookings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """我的预订"""
    return BookingService(db).get_user_bookings(current_user.id)


@router.get("/{booking_id}", response_model=BookingDetail)
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """预订详情（本人或管理员）"""
    return BookingService(db).get_booking(booking_id, current_user)


@router.put("/{booking_id}/cancel", response_model=BookingCancelled)
def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """取消预订（归还房量）"""
    booking = BookingService(db).cancel_booking(booking_id, current_user)
    return {"message": "预订已取消", "booking": booking}
