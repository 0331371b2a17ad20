"""
认证与授权
令牌由外部身份服务签发，本服务只负责校验并解析为操作人（Actor）。
未携带令牌的请求在允许匿名的接口上解析为访客。
"""
import logging
from datetime import datetime, timedelta, UTC
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from guesthouse.config import settings
from guesthouse.database import get_db
from guesthouse.models.entities import User, UserRole
from guesthouse_core.security.actor import Actor, ActorRole

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def create_access_token(user_id: int, role: UserRole,
                        expires_minutes: Optional[int] = None) -> str:
    """签发 JWT（用于测试和本地联调）"""
    expire = datetime.now(UTC) + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode = {
        "sub": str(user_id),
        "role": role.value if isinstance(role, UserRole) else str(role),
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """解码 JWT token"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials"
        )


def _actor_from_token(token: str, db: Session) -> Actor:
    payload = decode_token(token)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials"
        )

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is disabled"
        )

    # 角色以用户记录为准
    role = ActorRole.ADMIN if user.role == UserRole.ADMIN else ActorRole.USER
    return Actor(user_id=user.id, username=user.username, role=role)


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Actor:
    """获取当前登录用户（必须登录）"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return _actor_from_token(credentials.credentials, db)


async def get_optional_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Actor:
    """获取当前操作人，未登录时为访客"""
    if credentials is None:
        return Actor.guest()
    return _actor_from_token(credentials.credentials, db)


async def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    """管理员权限"""
    if not actor.is_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator role required"
        )
    return actor
