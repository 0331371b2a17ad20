"""
guesthouse_core/security/actor.py

操作人 - 每次业务变更显式传入，由传输层在请求入口解析一次
"""
from typing import Any, Dict, Optional
from dataclasses import dataclass
from enum import Enum


class ActorRole(str, Enum):
    """操作人角色"""
    ADMIN = "admin"      # 管理员
    USER = "user"        # 注册用户
    GUEST = "guest"      # 未登录访客
    SYSTEM = "system"    # 系统任务（定时巡检等）


@dataclass(frozen=True)
class Actor:
    """
    操作人

    Attributes:
        user_id: 注册用户ID（访客与系统任务为 None）
        username: 用户名
        role: 角色
    """

    user_id: Optional[int]
    username: Optional[str]
    role: ActorRole

    @classmethod
    def guest(cls) -> "Actor":
        """未登录访客"""
        return cls(user_id=None, username=None, role=ActorRole.GUEST)

    @classmethod
    def system(cls, name: str = "system") -> "Actor":
        """系统任务"""
        return cls(user_id=None, username=name, role=ActorRole.SYSTEM)

    def is_admin(self) -> bool:
        """检查是否为管理员"""
        return self.role == ActorRole.ADMIN

    def is_authenticated(self) -> bool:
        """是否为已登录的注册用户或管理员"""
        return self.user_id is not None and self.role in (ActorRole.ADMIN, ActorRole.USER)

    def owns(self, owner_id: Optional[int]) -> bool:
        """检查是否为记录所有者（访客预订没有所有者）"""
        return owner_id is not None and self.user_id == owner_id

    @property
    def label(self) -> str:
        """写入审计字段的操作人标识"""
        if self.username:
            return self.username
        if self.user_id is not None:
            return f"user:{self.user_id}"
        return self.role.value

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "user_id": self.user_id,
            "username": self.username,
            "role": self.role.value,
        }

    def __repr__(self) -> str:
        return f"Actor(user_id={self.user_id}, username={self.username!r}, role={self.role.value!r})"
