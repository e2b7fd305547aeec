"""
业主权限申请服务 - 角色状态机

    guest ──request──> pending_owner ──approve──> approved_owner
                            │                          │
                          reject                     reject
                            v                          v
                       rejected_owner <────────────────┘
                            │  ^
      request (按策略) ─────┘  └── approve 允许重新批准

admin 为静态分配的独立状态，不经过该状态机。
"""
import logging
import math
from enum import Enum
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from core.engine import StateMachine, StateMachineConfig, StateTransition, TransitionError
from app.config import settings
from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.ontology import (
    User, AccountState, OwnerRequestStatus, ACCOUNT_STATE_BY_REQUEST_STATUS, utcnow
)

logger = logging.getLogger(__name__)

MAX_REJECTION_REASON_LENGTH = 500


class ReRequestPolicy(str, Enum):
    """被拒绝后能否重新提交申请"""
    ALLOW_AFTER_REJECTION = "allow_after_rejection"   # 重新申请，记录重置为 pending
    BLOCK_AFTER_REJECTION = "block_after_rejection"   # 任何已有申请记录都阻止再次申请


def _rerequest_allowed(context: dict) -> bool:
    return context.get("policy") == ReRequestPolicy.ALLOW_AFTER_REJECTION


OWNER_ACCESS_MACHINE = StateMachine(StateMachineConfig(
    name="OwnerAccess",
    states=[s.value for s in AccountState],
    transitions=[
        StateTransition(AccountState.GUEST.value, AccountState.PENDING_OWNER.value, "request"),
        StateTransition(AccountState.REJECTED_OWNER.value, AccountState.PENDING_OWNER.value, "request",
                        condition=_rerequest_allowed),
        StateTransition(AccountState.PENDING_OWNER.value, AccountState.APPROVED_OWNER.value, "approve"),
        StateTransition(AccountState.REJECTED_OWNER.value, AccountState.APPROVED_OWNER.value, "approve"),
        StateTransition(AccountState.PENDING_OWNER.value, AccountState.REJECTED_OWNER.value, "reject"),
        StateTransition(AccountState.APPROVED_OWNER.value, AccountState.REJECTED_OWNER.value, "reject"),
    ],
    initial_state=AccountState.GUEST.value,
))


class OwnerAccessService:
    """业主权限申请服务"""

    def __init__(self, db: Session, policy: Optional[ReRequestPolicy] = None):
        self.db = db
        self.policy = policy or ReRequestPolicy(settings.OWNER_REREQUEST_POLICY)
        self.machine = OWNER_ACCESS_MACHINE

    def _get_target(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("用户不存在")
        return user

    def _transition(self, user: User, trigger: str, message: str) -> None:
        try:
            new_state = self.machine.fire(user.account_state, trigger, {"policy": self.policy})
        except TransitionError:
            raise ConflictError(message)
        user.account_state = AccountState(new_state)

    def request_access(self, user: User) -> User:
        """提交业主申请"""
        if user.account_state == AccountState.ADMIN:
            raise ConflictError("管理员账号不能申请业主权限")
        if user.account_state == AccountState.APPROVED_OWNER:
            raise ConflictError("您已拥有业主权限")
        if user.account_state == AccountState.PENDING_OWNER:
            raise ConflictError("您已有待审核的业主申请")

        self._transition(user, "request", "您的业主申请已被拒绝，不能再次提交")
        user.owner_requested_at = utcnow()
        user.owner_reviewed_at = None
        user.owner_reviewed_by = None
        user.owner_rejection_reason = None

        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Owner access requested by user {user.id}")
        return user

    def list_requests(self, status: Optional[OwnerRequestStatus] = None,
                      page: int = 1, limit: int = 10) -> Tuple[List[User], dict]:
        """获取业主申请列表（按申请时间倒序）"""
        if status:
            states = [ACCOUNT_STATE_BY_REQUEST_STATUS[status]]
        else:
            states = list(ACCOUNT_STATE_BY_REQUEST_STATUS.values())

        query = self.db.query(User).filter(User.account_state.in_(states))
        total = query.count()
        users = (
            query.order_by(User.owner_requested_at.desc(), User.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        pagination = {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if limit else 0,
        }
        return users, pagination

    def approve(self, user_id: int, admin: User) -> User:
        """批准申请（被拒绝的申请也可以重新批准）"""
        user = self._get_target(user_id)
        if user.owner_request_status is None:
            raise NotFoundError("该用户没有业主申请")
        if user.account_state == AccountState.APPROVED_OWNER:
            raise ConflictError("该业主申请已批准")

        self._transition(user, "approve", "该业主申请无法批准")
        user.owner_reviewed_at = utcnow()
        user.owner_reviewed_by = admin.id
        user.owner_rejection_reason = None

        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Owner request of user {user.id} approved by admin {admin.id}")
        return user

    def reject(self, user_id: int, admin: User, reason: Optional[str]) -> User:
        """拒绝申请（角色保持为普通用户）"""
        reason = (reason or "").strip()
        if not reason or len(reason) > MAX_REJECTION_REASON_LENGTH:
            raise ValidationError(f"必须填写拒绝原因（不超过 {MAX_REJECTION_REASON_LENGTH} 字）")

        user = self._get_target(user_id)
        if user.owner_request_status is None:
            raise NotFoundError("该用户没有业主申请")
        if user.account_state == AccountState.REJECTED_OWNER:
            raise ConflictError("该业主申请已被拒绝")

        self._transition(user, "reject", "该业主申请无法拒绝")
        user.owner_reviewed_at = utcnow()
        user.owner_reviewed_by = admin.id
        user.owner_rejection_reason = reason

        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Owner request of user {user.id} rejected by admin {admin.id}")
        return user

    def make_admin(self, user: User) -> User:
        """提升为管理员，同时清除业主申请记录"""
        user.account_state = AccountState.ADMIN
        user.owner_requested_at = None
        user.owner_reviewed_at = None
        user.owner_reviewed_by = None
        user.owner_rejection_reason = None
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user.id} promoted to admin")
        return user
