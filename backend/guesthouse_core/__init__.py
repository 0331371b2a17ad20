"""
guesthouse_core - 预订引擎通用框架层

独立于具体领域的基础组件：
- engine: 状态机、审计日志引擎
- notification: 通知渠道接口
- scheduler: 定时任务后端接口
- security: 操作人 (Actor) 抽象

使用方式:
    >>> from guesthouse_core.engine import StateMachine, audit_engine
    >>> from guesthouse_core.security import Actor, ActorRole
"""
