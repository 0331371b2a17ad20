"""
审计服务 - 预订变更的审计记录
写入失败只记录告警，不影响已提交的业务变更
"""
from typing import Optional
import logging

from guesthouse_core.engine.audit import AuditEngine, AuditLog, audit_engine

logger = logging.getLogger(__name__)


class AuditService:
    """审计服务"""

    def __init__(self, engine: AuditEngine = None):
        self.engine = engine or audit_engine

    def record(self, entity_type: str, entity_id: Optional[int], action: str,
               actor: Optional[str], old_value: Optional[str] = None,
               new_value: Optional[str] = None, note: str = "") -> Optional[AuditLog]:
        """记录一次变更，失败时返回 None"""
        try:
            return self.engine.log(
                entity_type=entity_type,
                entity_id=entity_id,
                action=action,
                actor=actor,
                old_value=old_value,
                new_value=new_value,
                note=note,
            )
        except Exception as e:
            logger.warning(f"Failed to record audit for {entity_type}:{entity_id} {action}: {e}")
            return None

    def history(self, entity_type: str, entity_id: int):
        return self.engine.get_by_entity(entity_type, entity_id)


__all__ = ["AuditService"]
