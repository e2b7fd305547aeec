"""
认证与业主申请路由
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.ontology import User, OwnerRequestStatus
from app.models.schemas import (
    RegisterRequest, LoginRequest, AuthResponse, UserResponse, ProfileUpdate, ProfileResponse,
    OwnerRequestSubmitted, OwnerRequestList, OwnerRequestUser, OwnerRequestReview,
    RejectOwnerRequest, MyOwnerRequest, Pagination
)
from app.services.owner_access_service import OwnerAccessService
from app.services.user_service import UserService
from app.security.auth import get_current_user, require_admin

router = APIRouter(prefix="/auth", tags=["认证"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """注册"""
    return UserService(db).register(data)


@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """登录"""
    return UserService(db).authenticate(data.email, data.password)


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """获取当前用户信息"""
    return current_user


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """更新个人资料"""
    user = UserService(db).update_profile(current_user, data)
    return {"message": "个人资料已更新", "user": user}


# ============== 业主申请 ==============

@router.post("/request-owner-access", response_model=OwnerRequestSubmitted)
def request_owner_access(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """提交业主权限申请"""
    user = OwnerAccessService(db).request_access(current_user)
    return {
        "message": "业主申请已提交",
        "status": user.owner_request_status,
        "requested_at": user.owner_requested_at,
    }


@router.get("/owner-requests", response_model=OwnerRequestList)
def list_owner_requests(
    status: Optional[OwnerRequestStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """获取业主申请列表（管理员）"""
    users, pagination = OwnerAccessService(db).list_requests(status, page, limit)
    return OwnerRequestList(
        requests=[OwnerRequestUser.model_validate(u) for u in users],
        pagination=Pagination(**pagination),
    )


@router.post("/approve-owner-request/{user_id}", response_model=OwnerRequestReview)
def approve_owner_request(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """批准业主申请（管理员）"""
    user = OwnerAccessService(db).approve(user_id, current_user)
    return {"message": "业主申请已批准", "user": user}


@router.post("/reject-owner-request/{user_id}", response_model=OwnerRequestReview)
def reject_owner_request(
    user_id: int,
    data: RejectOwnerRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """拒绝业主申请（管理员，必须填写原因）"""
    user = OwnerAccessService(db).reject(user_id, current_user, data.rejection_reason)
    return {"message": "业主申请已拒绝", "user": user}


@router.get("/my-owner-request", response_model=MyOwnerRequest)
def get_my_owner_request(current_user: User = Depends(get_current_user)):
    """查询自己的业主申请状态"""
    return current_user
