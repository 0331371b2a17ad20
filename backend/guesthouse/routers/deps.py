"""
路由公共依赖与异常映射
"""
from datetime import date
from typing import Callable
from fastapi import HTTPException, status
from guesthouse.services.errors import BookingError

_STATUS_BY_CODE = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "conflict": status.HTTP_409_CONFLICT,
    "illegal_transition": status.HTTP_409_CONFLICT,
    "invalid_range": status.HTTP_400_BAD_REQUEST,
    "invalid_request": status.HTTP_400_BAD_REQUEST,
    "price_unset": status.HTTP_400_BAD_REQUEST,
    "inconsistent_state": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def http_error(e: BookingError) -> HTTPException:
    """业务异常 -> HTTP 响应"""
    return HTTPException(
        status_code=_STATUS_BY_CODE.get(e.code, status.HTTP_400_BAD_REQUEST),
        detail=e.to_dict()
    )


def get_clock() -> Callable[[], date]:
    """“今天”的来源（测试中可覆盖）"""
    return date.today
