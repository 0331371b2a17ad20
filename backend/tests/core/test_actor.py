"""
测试 guesthouse_core.security.actor 操作人
"""
from guesthouse_core.security.actor import Actor, ActorRole


def test_guest():
    """测试访客"""
    guest = Actor.guest()
    assert guest.is_authenticated() is False
    assert guest.is_admin() is False
    assert guest.owns(None) is False
    assert guest.label == "guest"


def test_system():
    """测试系统任务"""
    actor = Actor.system("availability_sweep")
    assert actor.role == ActorRole.SYSTEM
    assert actor.label == "availability_sweep"
    assert actor.is_authenticated() is False


def test_user_ownership():
    """测试所有者判断"""
    actor = Actor(user_id=3, username="alice", role=ActorRole.USER)
    assert actor.is_authenticated() is True
    assert actor.owns(3) is True
    assert actor.owns(4) is False
    assert actor.owns(None) is False


def test_label_falls_back_to_user_id():
    """测试无用户名时的标识"""
    assert Actor(user_id=9, username=None, role=ActorRole.USER).label == "user:9"


def test_to_dict():
    """测试转换为字典"""
    actor = Actor(user_id=1, username="admin", role=ActorRole.ADMIN)
    assert actor.to_dict() == {"user_id": 1, "username": "admin", "role": "admin"}
    assert actor.is_admin() is True
