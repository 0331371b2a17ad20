"""
测试 guesthouse_core.engine.audit 审计引擎
"""
import threading
from guesthouse_core.engine.audit import AuditEngine, AuditSeverity


def test_log_and_query():
    """测试记录与查询"""
    engine = AuditEngine()
    engine.log("Booking", 1, "CREATE", actor="alice", new_value='{"id": 1}')
    engine.log("Booking", 1, "UPDATE", actor="admin", old_value='{"id": 1}', new_value='{"id": 1}')
    engine.log("Booking", 2, "CREATE", actor="alice")

    assert [log.action for log in engine.get_by_entity("Booking", 1)] == ["CREATE", "UPDATE"]
    assert len(engine.get_by_actor("alice")) == 2
    assert len(engine.get_by_action("CREATE")) == 2
    assert len(engine.get_all(limit=2)) == 2
    assert len(engine.get_all(offset=2)) == 1


def test_to_dict():
    """测试转换为字典"""
    entry = AuditEngine().log("Booking", 5, "DELETE", actor="admin", note="Booking deleted",
                              severity=AuditSeverity.WARNING)
    data = entry.to_dict()
    assert data["entity_id"] == 5
    assert data["severity"] == "warning"
    assert data["note"] == "Booking deleted"
    assert data["extra"] == {}


def test_max_logs_drops_oldest():
    """测试超出上限时丢弃最旧记录"""
    engine = AuditEngine(max_logs=3)
    for i in range(5):
        engine.log("Booking", i, "CREATE")
    assert [log.entity_id for log in engine.get_all()] == [2, 3, 4]


def test_thread_safe_logging():
    """测试并发写入"""
    engine = AuditEngine()

    def worker():
        for i in range(50):
            engine.log("Booking", i, "UPDATE")

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(engine.get_all(limit=1000)) == 200


def test_clear():
    """测试清空"""
    engine = AuditEngine()
    engine.log("Booking", 1, "CREATE")
    engine.clear()
    assert engine.get_all() == []
