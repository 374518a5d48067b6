import threading
from typing import Dict


class KeyedLocks:
    """按会话 ID 分配的独立锁。

    _guard 只保护字典本身的插入，不会在任何会话变更期间被持有，
    因此不同会话之间互不阻塞。
    """

    def __init__(self) -> None:
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def get(self, key: str) -> threading.Lock:
        lock = self._locks.get(key)
        if lock is not None:
            return lock
        with self._guard:
            return self._locks.setdefault(key, threading.Lock())
