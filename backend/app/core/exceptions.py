"""
错误类型与统一错误响应 (Error types and the uniform error body)

可用率引擎只对非法的查询参数抛出异常（InvalidRangeError），数据源故障以
UpstreamFetchError 原样向上传递；数据质量问题不抛异常，只收集为报表告警。
HTTP 层把所有异常都转换成同一结构：{"error", "message", "detail", "status_code"}。

The engine raises only for malformed query parameters (InvalidRangeError); record source
failures surface as UpstreamFetchError. Data-quality problems become report warnings.
Every error leaves the API with the same four-key JSON body.
"""
import logging
import traceback
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BusinessError(Exception):
    """可预期的错误，携带 HTTP 状态码和机器可读的 error 代码。CLI 中以退出码 1 结束。"""
    status_code: int = 400
    error: str = "business_error"

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class PermissionDeniedError(BusinessError):
    """当前用户角色无权访问报表 (Role not allowed)"""
    status_code = 403
    error = "permission_denied"


class ValidationError(BusinessError):
    status_code = 422
    error = "validation_error"


class InvalidRangeError(ValidationError):
    """报表日期范围非法：开始日期晚于结束日期 (date_from is after date_to)"""
    error = "invalid_range"


class UpstreamFetchError(BusinessError):
    """故障记录数据源读取失败 (Breakdown record source failed)"""
    status_code = 502
    error = "upstream_fetch_error"


def _error_body(status_code: int, error: str, message: str, detail: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, "detail": detail, "status_code": status_code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    挂载三层处理器：BusinessError 按自身状态码返回；FastAPI/Starlette 的 HTTPException
    （401、404 等）保留状态码；其余异常记录 traceback 后返回 500。
    """

    @app.exception_handler(BusinessError)
    async def business_error_handler(request: Request, exc: BusinessError) -> JSONResponse:
        if isinstance(exc, UpstreamFetchError):
            logger.error("Record source failure on %s %s: %s", request.method, request.url.path, exc.message)
        elif isinstance(exc, PermissionDeniedError):
            logger.info("Denied %s %s: %s", request.method, request.url.path, exc.detail)
        return _error_body(exc.status_code, exc.error, exc.message, exc.detail)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return _error_body(exc.status_code, "http_error", str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception on %s %s: %s\n%s",
            request.method, request.url.path, exc, traceback.format_exc(),
        )
        return _error_body(500, "internal_server_error", "报表服务内部错误 (Internal server error)")
