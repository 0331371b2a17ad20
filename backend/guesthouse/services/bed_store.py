"""
床位库存存储
床位的查找、行锁读取、可用性标记写入，以及宾馆/房间的只读查询
"""
from typing import Dict, Iterator, List, Optional
from contextlib import contextmanager
from datetime import datetime
import threading

from sqlalchemy.orm import Session

from guesthouse.models.entities import Bed, Room, GuestHouse, User


# ============== 床位互斥范围 ==============

_registry_lock = threading.Lock()
_bed_locks: Dict[int, threading.Lock] = {}


def _lock_for(bed_id: int) -> threading.Lock:
    with _registry_lock:
        lock = _bed_locks.get(bed_id)
        if lock is None:
            lock = threading.Lock()
            _bed_locks[bed_id] = lock
        return lock


@contextmanager
def bed_lock(bed_id: int) -> Iterator[None]:
    """
    同一床位上的变更串行执行（进程内）

    与 get_for_update 的行锁配合使用：冲突检查、写入、可用性重算和提交
    都必须发生在该范围内
    """
    lock = _lock_for(bed_id)
    with lock:
        yield


class BedStore:
    """床位库存存储"""

    def __init__(self, db: Session):
        self.db = db

    # ============== 床位 ==============

    def get(self, bed_id: int) -> Optional[Bed]:
        return self.db.query(Bed).filter(Bed.id == bed_id).first()

    def get_for_update(self, bed_id: int) -> Optional[Bed]:
        """读取床位并加行锁（不支持 FOR UPDATE 的数据库上忽略）"""
        return self.db.query(Bed).filter(Bed.id == bed_id).with_for_update().first()

    def list_by_room(self, room_id: int, available_only: bool = False) -> List[Bed]:
        query = self.db.query(Bed).filter(Bed.room_id == room_id)
        if available_only:
            query = query.filter(Bed.is_available == True)
        return query.order_by(Bed.bed_number).all()

    def all_ids(self) -> List[int]:
        """全部床位ID（巡检用）"""
        return [row[0] for row in self.db.query(Bed.id).order_by(Bed.id).all()]

    def set_available_for_booking(self, bed: Bed, value: bool, actor_label: str) -> bool:
        """
        写入可预订标记

        Returns:
            True 如果标记发生变化
        """
        if bool(bed.is_available_for_booking) == value:
            return False
        bed.is_available_for_booking = value
        bed.last_modified_by = actor_label
        bed.updated_at = datetime.utcnow()
        return True

    # ============== 只读库存 ==============

    def get_room(self, room_id: int) -> Optional[Room]:
        return self.db.query(Room).filter(Room.id == room_id).first()

    def count_guest_houses(self) -> int:
        return self.db.query(GuestHouse).count()

    def count_rooms(self) -> int:
        return self.db.query(Room).count()

    def count_beds(self) -> int:
        return self.db.query(Bed).count()

    def count_occupied_beds(self) -> int:
        """按标记统计已占用床位"""
        return self.db.query(Bed).filter(Bed.is_available_for_booking == False).count()

    def count_users(self) -> int:
        return self.db.query(User).count()


__all__ = ["BedStore", "bed_lock"]
