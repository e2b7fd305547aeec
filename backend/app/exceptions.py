"""
业务异常定义与 FastAPI 异常处理器

服务层只抛出这里定义的异常，路由层不做 try/except，
统一由 register_exception_handlers 注册的处理器转换为 HTTP 响应。
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ErrorType:
    """错误类型编码（响应体中的 error_type 字段）"""

    VALIDATION_ERROR = "validation_error"
    INVALID_DATE = "invalid_date"
    INVALID_ROOM = "invalid_room"
    INSUFFICIENT_INVENTORY = "insufficient_inventory"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    CONFLICT = "conflict"
    AUTHENTICATION_ERROR = "authentication_error"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    INTERNAL_ERROR = "internal_error"


class AppError(Exception):
    """
    应用异常基类

    Attributes:
        message: 面向调用方的错误信息
        context: 附加信息，会原样放入响应体
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type = ErrorType.INTERNAL_ERROR

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        body = {"detail": self.message, "error_type": self.error_type}
        body.update(self.context)
        return body


class ValidationError(AppError):
    """输入缺失或格式错误"""
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = ErrorType.VALIDATION_ERROR


class InvalidDateError(ValidationError):
    """入住/离店日期不合法"""
    error_type = ErrorType.INVALID_DATE


class InvalidRoomError(ValidationError):
    """酒店没有该房型"""
    error_type = ErrorType.INVALID_ROOM


class InsufficientInventoryError(AppError):
    """可售房量不足"""
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = ErrorType.INSUFFICIENT_INVENTORY


class CapacityExceededError(AppError):
    """入住人数超过房间容量"""
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = ErrorType.CAPACITY_EXCEEDED


class ConflictError(AppError):
    """状态转换前置条件不满足（重复审批、重复取消等）"""
    status_code = status.HTTP_409_CONFLICT
    error_type = ErrorType.CONFLICT


class AuthenticationError(AppError):
    """缺少或无效的认证凭证"""
    status_code = status.HTTP_401_UNAUTHORIZED
    error_type = ErrorType.AUTHENTICATION_ERROR


class AuthorizationError(AppError):
    """已认证但角色或归属不满足"""
    status_code = status.HTTP_403_FORBIDDEN
    error_type = ErrorType.PERMISSION_DENIED


class NotFoundError(AppError):
    """实体不存在或对调用方不可见"""
    status_code = status.HTTP_404_NOT_FOUND
    error_type = ErrorType.NOT_FOUND


class InternalError(AppError):
    """持久化层等意外故障"""


GENERIC_SERVER_ERROR = "服务器内部错误"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": GENERIC_SERVER_ERROR, "error_type": exc.error_type},
        )
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "请求参数不合法",
            "error_type": ErrorType.VALIDATION_ERROR,
            "errors": jsonable_encoder(exc.errors()),
        },
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"Database error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": GENERIC_SERVER_ERROR, "error_type": ErrorType.INTERNAL_ERROR},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": GENERIC_SERVER_ERROR, "error_type": ErrorType.INTERNAL_ERROR},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """注册全局异常处理器"""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
