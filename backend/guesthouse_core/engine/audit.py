"""
guesthouse_core/engine/audit.py

审计日志引擎 - 记录实体的创建、更新、删除
存储格式不属于引擎职责，此处为内存存储，可替换为持久化实现
"""
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import logging
import threading
import uuid

logger = logging.getLogger(__name__)


class AuditSeverity(str, Enum):
    """审计日志严重程度"""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class AuditLog:
    """
    审计日志条目

    Attributes:
        log_id: 日志唯一标识
        timestamp: 日志时间戳
        entity_type: 实体类型（如 "Booking"）
        entity_id: 实体ID
        action: 操作类型（CREATE / UPDATE / DELETE）
        actor: 操作人标识
        old_value: 旧值（JSON）
        new_value: 新值（JSON）
        note: 备注
        severity: 严重程度
    """

    log_id: str
    timestamp: datetime
    entity_type: str
    entity_id: Optional[int]
    action: str
    actor: Optional[str]
    old_value: Optional[str]
    new_value: Optional[str]
    note: str = ""
    severity: AuditSeverity = AuditSeverity.INFO
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "log_id": self.log_id,
            "timestamp": self.timestamp.isoformat(),
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "action": self.action,
            "actor": self.actor,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "note": self.note,
            "severity": self.severity.value,
            "extra": self.extra,
        }


class AuditEngine:
    """
    审计日志引擎

    特性：
    - 日志记录（线程安全）
    - 按实体/操作人/操作类型查询
    - 内存存储，超出上限时丢弃最旧记录

    Example:
        >>> engine = AuditEngine()
        >>> engine.log(
        ...     entity_type="Booking",
        ...     entity_id=7,
        ...     action="UPDATE",
        ...     actor="admin",
        ...     old_value='{"status": "pending"}',
        ...     new_value='{"status": "confirmed"}',
        ... )
        >>> logs = engine.get_by_entity("Booking", 7)
    """

    def __init__(self, max_logs: int = 10000):
        """
        初始化审计引擎

        Args:
            max_logs: 最大日志条数（内存存储）
        """
        self._logs: List[AuditLog] = []
        self._max_logs = max_logs
        self._lock = threading.Lock()

    def log(
        self,
        entity_type: str,
        entity_id: Optional[int],
        action: str,
        actor: Optional[str] = None,
        old_value: Optional[str] = None,
        new_value: Optional[str] = None,
        note: str = "",
        severity: AuditSeverity = AuditSeverity.INFO,
        extra: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        """
        记录审计日志

        Returns:
            创建的审计日志
        """
        entry = AuditLog(
            log_id=str(uuid.uuid4()),
            timestamp=datetime.utcnow(),
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor=actor,
            old_value=old_value,
            new_value=new_value,
            note=note,
            severity=severity,
            extra=extra or {},
        )

        with self._lock:
            self._logs.append(entry)
            if len(self._logs) > self._max_logs:
                self._logs.pop(0)

        logger.info(f"Audit log: {action} by {actor} on {entity_type}:{entity_id}")
        return entry

    def get_by_entity(self, entity_type: str, entity_id: int, limit: int = 100) -> List[AuditLog]:
        """获取实体的日志（按时间顺序）"""
        with self._lock:
            logs = [
                log for log in self._logs
                if log.entity_type == entity_type and log.entity_id == entity_id
            ]
        return logs[:limit]

    def get_by_actor(self, actor: str, limit: int = 100) -> List[AuditLog]:
        """获取操作人的日志"""
        with self._lock:
            logs = [log for log in self._logs if log.actor == actor]
        return logs[:limit]

    def get_by_action(self, action: str, limit: int = 100) -> List[AuditLog]:
        """获取指定操作的日志"""
        with self._lock:
            logs = [log for log in self._logs if log.action == action]
        return logs[:limit]

    def get_all(self, limit: int = 100, offset: int = 0) -> List[AuditLog]:
        """获取所有日志（分页）"""
        with self._lock:
            return self._logs[offset: offset + limit]

    def clear(self) -> None:
        """清空所有日志（用于测试）"""
        with self._lock:
            self._logs.clear()


# 全局审计引擎实例
audit_engine = AuditEngine()


# 导出
__all__ = [
    "AuditSeverity",
    "AuditLog",
    "AuditEngine",
    "audit_engine",
]
