import threading
from typing import Dict, Optional
from uuid import UUID


class PointsStore:
    """
    In-memory (receipt id -> reward points) mapping shared by all request threads.

    Every read and write goes through one lock, so a lookup sees a record either
    fully inserted or not at all. Records are never replaced once written.
    """

    def __init__(self):
        self._points: Dict[UUID, int] = {}
        self._lock = threading.Lock()

    def put(self, receipt_id: UUID, points: int):
        with self._lock:
            if receipt_id in self._points:
                raise KeyError(f"receipt id already stored ({receipt_id})")
            self._points[receipt_id] = points

    def get(self, receipt_id: UUID) -> Optional[int]:
        with self._lock:
            return self._points.get(receipt_id)

    def __contains__(self, receipt_id) -> bool:
        with self._lock:
            return receipt_id in self._points

    def __len__(self) -> int:
        with self._lock:
            return len(self._points)
