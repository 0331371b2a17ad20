"""
guesthouse_core/security - 操作人抽象

业务层不读取全局安全上下文，所有变更操作显式接收 Actor 参数。
"""
from guesthouse_core.security.actor import Actor, ActorRole

__all__ = ["Actor", "ActorRole"]
