"""
用户服务 - 注册 / 登录 / 个人资料
"""
import logging
from typing import Optional
from sqlalchemy.orm import Session
from app.exceptions import AuthenticationError, ValidationError
from app.models.ontology import User, AccountState
from app.models.schemas import RegisterRequest, ProfileUpdate
from app.security.auth import get_password_hash, verify_password, create_access_token

logger = logging.getLogger(__name__)


class UserService:
    """用户服务"""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> Optional[User]:
        """获取单个用户"""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        """根据邮箱获取用户"""
        return self.db.query(User).filter(User.email == email.lower()).first()

    def register(self, data: RegisterRequest) -> dict:
        """注册新用户（默认普通用户）并签发 token"""
        if self.get_user_by_email(data.email):
            raise ValidationError("该邮箱已注册")

        user = User(
            name=data.name,
            email=data.email.lower(),
            password_hash=get_password_hash(data.password),
            phone=data.phone,
            account_state=AccountState.GUEST,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User registered: {user.id}")
        return {"token": create_access_token(user.id), "user": user}

    def authenticate(self, email: str, password: str) -> dict:
        """认证登录"""
        user = self.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise AuthenticationError("邮箱或密码错误")
        return {"token": create_access_token(user.id), "user": user}

    def update_profile(self, user: User, data: ProfileUpdate) -> User:
        """更新个人资料"""
        email = data.email.lower()
        taken = self.db.query(User).filter(User.email == email, User.id != user.id).first()
        if taken:
            raise ValidationError("该邮箱已被其他用户使用")

        user.name = data.name
        user.email = email
        user.phone = data.phone
        if data.profile_photo is not None:
            user.profile_photo = data.profile_photo

        self.db.commit()
        self.db.refresh(user)
        return user
