"""
预订引擎的类型化失败
路由层按 code 映射为 HTTP 响应
"""


class BookingError(Exception):
    """预订引擎异常基类"""

    code = "booking_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class NotFoundError(BookingError):
    """预订/床位/房间/用户不存在"""
    code = "not_found"


class InvalidRangeError(BookingError):
    """离店日期不晚于入住日期"""
    code = "invalid_range"


class InvalidRequestError(BookingError):
    """请求缺少必要信息（如匿名预订未填写姓名）"""
    code = "invalid_request"


class ConflictError(BookingError):
    """同一床位存在重叠的有效预订"""
    code = "conflict"


class IllegalTransitionError(BookingError):
    """当前状态不允许该状态变更"""
    code = "illegal_transition"


class PriceUnsetError(BookingError):
    """床位未设置每晚价格"""
    code = "price_unset"


class ForbiddenError(BookingError):
    """操作人无权执行该变更"""
    code = "forbidden"


class InconsistentStateError(BookingError):
    """
    内部一致性错误：已存在相互重叠的有效预订
    说明此前存在未受保护的写入，不能当作用户冲突处理
    """
    code = "inconsistent_state"

    def __init__(self, message: str, bed_id: int = None, booking_ids=None):
        super().__init__(message)
        self.bed_id = bed_id
        self.booking_ids = list(booking_ids or [])


__all__ = [
    "BookingError",
    "NotFoundError",
    "InvalidRangeError",
    "InvalidRequestError",
    "ConflictError",
    "IllegalTransitionError",
    "PriceUnsetError",
    "ForbiddenError",
    "InconsistentStateError",
]
