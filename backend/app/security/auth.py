"""
认证与授权模块

- bcrypt 密码哈希
- JWT (HS256) 访问令牌，sub = 用户 ID
- 角色守卫：require_admin / require_approved_owner
- 归属检查：管理员放行，否则必须是资源所有者
"""
import bcrypt
import logging
from datetime import datetime, timedelta, UTC
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from app.config import settings
from app.database import get_db
from app.exceptions import AuthenticationError, AuthorizationError
from app.models.ontology import User

logger = logging.getLogger(__name__)

# 缺少凭证时由我们自己返回 401
security = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    """密码哈希"""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码"""
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """创建 JWT token"""
    expire = datetime.now(UTC) + (expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode = {
        "sub": str(user_id),
        "exp": expire
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """解码 JWT token（过期或签名错误均视为无效）"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise AuthenticationError("无效或已过期的认证凭证")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """获取当前登录用户"""
    if credentials is None:
        raise AuthenticationError("需要认证凭证")

    payload = decode_token(credentials.credentials)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthenticationError("无效的认证凭证")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthenticationError("无效的认证凭证：用户不存在")

    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """仅管理员"""
    if not current_user.is_admin:
        raise AuthorizationError(
            "权限不足：需要管理员权限",
            {"current_role": current_user.role.value}
        )
    return current_user


async def require_approved_owner(current_user: User = Depends(get_current_user)) -> User:
    """仅已通过审核的业主"""
    if not current_user.is_approved_owner:
        request_status = current_user.owner_request_status
        raise AuthorizationError(
            "权限不足：需要已审核通过的业主账号",
            {"status": request_status.value if request_status else "not_requested"}
        )
    return current_user


async def require_approved_owner_or_admin(current_user: User = Depends(get_current_user)) -> User:
    """已审核业主或管理员（酒店管理写操作，归属另行检查）"""
    if current_user.is_admin:
        return current_user
    return await require_approved_owner(current_user)


def ensure_owner_or_admin(actor: User, owner_id: int) -> None:
    """归属检查：管理员放行，否则 actor 必须是资源所有者"""
    if actor.is_admin:
        return
    if actor.id != owner_id:
        logger.warning(f"Ownership check failed: user {actor.id} on resource owned by {owner_id}")
        raise AuthorizationError("权限不足：只能操作自己的资源")
