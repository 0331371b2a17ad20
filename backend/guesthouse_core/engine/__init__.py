"""
guesthouse_core/engine - 核心引擎

- state_machine: 带条件的状态转换
- audit: 审计日志引擎
"""
from guesthouse_core.engine.state_machine import (
    StateTransition,
    StateMachineConfig,
    StateMachine,
)
from guesthouse_core.engine.audit import AuditSeverity, AuditLog, AuditEngine, audit_engine

__all__ = [
    "StateTransition",
    "StateMachineConfig",
    "StateMachine",
    "AuditSeverity",
    "AuditLog",
    "AuditEngine",
    "audit_engine",
]
