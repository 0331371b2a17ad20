"""
实体定义
GuestHouse / Room / User 由外部库存与身份服务维护，本服务只读；
Bed 的可用性标记与 Booking 由预订引擎维护
"""
from datetime import datetime, date
from enum import Enum
from typing import Optional
from sqlalchemy import (
    Column, Integer, String, DateTime, Date,
    ForeignKey, Text, Enum as SQLEnum, Boolean, Numeric, Index
)
from sqlalchemy.orm import relationship
from guesthouse.database import Base


# ============== 枚举定义 ==============

class BookingStatus(str, Enum):
    """预订状态枚举"""
    PENDING = "pending"        # 待审批
    CONFIRMED = "confirmed"    # 已确认
    DENIED = "denied"          # 已拒绝
    CANCELED = "canceled"      # 已取消
    COMPLETED = "completed"    # 已完成


# 占用床位的状态（拒绝/取消不参与冲突判断）
ACTIVE_BOOKING_STATUSES = (
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.COMPLETED,
)

# 计入营收的状态
REVENUE_BOOKING_STATUSES = (
    BookingStatus.CONFIRMED,
    BookingStatus.COMPLETED,
)


class UserRole(str, Enum):
    """用户角色"""
    USER = "user"      # 普通用户
    ADMIN = "admin"    # 管理员


# ============== 实体定义 ==============

class GuestHouse(Base):
    """宾馆"""
    __tablename__ = "guest_houses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    location = Column(String(200))
    created_at = Column(DateTime, default=datetime.utcnow)

    rooms = relationship("Room", back_populates="guest_house")


class Room(Base):
    """房间"""
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    guest_house_id = Column(Integer, ForeignKey("guest_houses.id"), nullable=False)
    room_number = Column(String(20), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    guest_house = relationship("GuestHouse", back_populates="rooms")
    beds = relationship("Bed", back_populates="room")


class Bed(Base):
    """
    床位 - 最小可预订单元

    is_available: 员工维护的物理/管理可用性
    is_available_for_booking: 由可用性投影维护的缓存，不能作为冲突判断依据
    """
    __tablename__ = "beds"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    bed_number = Column(String(20), unique=True, nullable=False)
    price_per_night = Column(Numeric(10, 2))                     # 未设置时无法计价
    is_available = Column(Boolean, default=True, nullable=False)
    is_available_for_booking = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    created_by = Column(String(50))
    last_modified_by = Column(String(50))

    room = relationship("Room", back_populates="beds")
    bookings = relationship("Booking", back_populates="bed")


class User(Base):
    """注册用户"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False)
    email = Column(String(100))
    first_name = Column(String(50))
    last_name = Column(String(50))
    role = Column(SQLEnum(UserRole), default=UserRole.USER, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    bookings = relationship("Booking", back_populates="user")


class Booking(Base):
    """
    预订 - 床位在 [check_in_date, check_out_date) 期间的占用
    total_price 始终由 nights × 床位单价 计算得出
    """
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_bed_dates", "bed_id", "check_in_date", "check_out_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    bed_id = Column(Integer, ForeignKey("beds.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    # 访客联系信息（未登录预订时必填姓名）
    first_name = Column(String(50))
    last_name = Column(String(50))
    email = Column(String(100))
    phone_number = Column(String(20))
    gender = Column(String(10))
    address = Column(Text)

    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False)       # 不含当天
    total_price = Column(Numeric(10, 2), nullable=False)
    status = Column(SQLEnum(BookingStatus), default=BookingStatus.PENDING, nullable=False, index=True)
    purpose = Column(Text)
    rejection_reason = Column(Text)
    cancellation_reason = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    created_by = Column(String(50))
    last_modified_by = Column(String(50))

    bed = relationship("Bed", back_populates="bookings")
    user = relationship("User", back_populates="bookings")

    @property
    def nights(self) -> int:
        """入住晚数"""
        return (self.check_out_date - self.check_in_date).days

    @property
    def guest_name(self) -> str:
        """显示用姓名：注册用户取账户姓名，否则取访客填写的姓名"""
        if self.user is not None:
            return f"{self.user.first_name or ''} {self.user.last_name or ''}".strip() or self.user.username
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def contact_email(self) -> Optional[str]:
        """通知用邮箱"""
        if self.email:
            return self.email
        return self.user.email if self.user is not None else None

    def overlaps(self, check_in: date, check_out: date) -> bool:
        """半开区间重叠判断：退房当天可供新入住"""
        return self.check_out_date > check_in and self.check_in_date < check_out
