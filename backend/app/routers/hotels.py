"""
酒店路由
公开检索 / 详情 / 城市列表；业主管理；管理员按业主查询
"""
from decimal import Decimal
from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.config import settings
from app.database import get_db
from app.models.ontology import User
from app.models.schemas import (
    HotelCreate, HotelUpdate, HotelResponse, HotelPage, HotelPagination,
    HotelStatusToggled, MessageResponse
)
from app.services.hotel_service import HotelService, SORT_RATING
from app.security.auth import require_admin, require_approved_owner, require_approved_owner_or_admin

router = APIRouter(prefix="/hotels", tags=["酒店"])


@router.get("", response_model=HotelPage)
def search_hotels(
    city: Optional[str] = None,
    search: Optional[str] = None,
    rating: Optional[float] = Query(None, ge=0, le=5),
    amenities: Optional[List[str]] = Query(None),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    sort_by: str = Query(SORT_RATING, alias="sortBy"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db)
):
    """检索酒店（仅上架）"""
    hotels, pagination = HotelService(db).search_hotels(
        city=city, search=search, min_rating=rating, amenities=amenities,
        min_price=min_price, max_price=max_price, sort_by=sort_by,
        page=page, limit=limit,
    )
    return HotelPage(hotels=hotels, pagination=HotelPagination(**pagination))


@router.get("/cities/list", response_model=List[str])
def list_cities(db: Session = Depends(get_db)):
    """上架酒店所在城市"""
    return HotelService(db).list_cities()


@router.get("/my-hotels", response_model=HotelPage)
def get_my_hotels(
    status: Literal["active", "inactive", "all"] = "all",
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_approved_owner)
):
    """我的酒店（业主）"""
    hotels, pagination = HotelService(db).get_owner_hotels(current_user.id, status, page, limit)
    return HotelPage(
        hotels=[HotelResponse.model_validate(h) for h in hotels],
        pagination=HotelPagination(**pagination),
    )


@router.get("/owner/{owner_id}", response_model=List[HotelResponse])
def get_hotels_by_owner(
    owner_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """指定业主的酒店（管理员）"""
    return HotelService(db).get_hotels_by_owner(owner_id)


@router.get("/{hotel_id}", response_model=HotelResponse)
def get_hotel(hotel_id: int, db: Session = Depends(get_db)):
    """酒店详情（下架返回 404）"""
    return HotelService(db).get_public_hotel(hotel_id)


@router.post("", response_model=HotelResponse, status_code=status.HTTP_201_CREATED)
def create_hotel(
    data: HotelCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_approved_owner)
):
    """创建酒店（业主）"""
    return HotelService(db).create_hotel(data, current_user)


@router.put("/{hotel_id}", response_model=HotelResponse)
def update_hotel(
    hotel_id: int,
    data: HotelUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_approved_owner_or_admin)
):
    """更新酒店（所有者或管理员）"""
    return HotelService(db).update_hotel(hotel_id, data, current_user)


@router.delete("/{hotel_id}", response_model=MessageResponse)
def delete_hotel(
    hotel_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_approved_owner_or_admin)
):
    """删除酒店（所有者或管理员）"""
    HotelService(db).delete_hotel(hotel_id, current_user)
    return {"message": "酒店已删除"}


@router.patch("/{hotel_id}/toggle-status", response_model=HotelStatusToggled)
def toggle_hotel_status(
    hotel_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_approved_owner_or_admin)
):
    """上架 / 下架（所有者或管理员）"""
    hotel = HotelService(db).toggle_status(hotel_id, current_user)
    message = "酒店已上架" if hotel.is_active else "酒店已下架"
    return {"message": message, "is_active": hotel.is_active}
