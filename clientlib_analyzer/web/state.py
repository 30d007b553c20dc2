"""In-memory scan sessions for the API."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from clientlib_analyzer.models import AnalysisResult


@dataclass
class ScanSession:
    result: AnalysisResult
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


class AppState:
    """Scan sessions shared by all API routes of one app."""

    def __init__(self):
        self._lock = threading.Lock()
        self._scans: dict[str, ScanSession] = {}

    def add_scan(self, session: ScanSession) -> None:
        with self._lock:
            self._scans[session.id] = session

    def get_scan(self, scan_id: str) -> ScanSession | None:
        with self._lock:
            return self._scans.get(scan_id)

    def delete_scan(self, scan_id: str) -> bool:
        with self._lock:
            return self._scans.pop(scan_id, None) is not None
