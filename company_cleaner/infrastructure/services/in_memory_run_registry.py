"""
Name: In-Memory Run Registry

Responsibilities:
  - Remember which destination page a run fingerprint produced
  - Let identical re-runs return the existing page instead of writing again

Constraints:
  - Process-local, lost on restart
  - Thread-safe (FastAPI may serve requests from a threadpool)
"""

from threading import Lock
from typing import Dict, Optional


class InMemoryRunRegistry:
    """R: RunRegistry backed by a dict."""

    def __init__(self) -> None:
        self._runs: Dict[str, str] = {}
        self._lock = Lock()

    def get(self, fingerprint: str) -> Optional[str]:
        with self._lock:
            return self._runs.get(fingerprint)

    def put(self, fingerprint: str, document_id: str) -> None:
        with self._lock:
            self._runs[fingerprint] = document_id

    def clear(self) -> None:
        with self._lock:
            self._runs.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._runs)
