"""Request timing and failure accounting for the map API"""

import threading
import time
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict

import structlog

logger = structlog.get_logger(__name__)


class RequestMonitor:
    """Counts requests, slow responses and failures by error kind"""

    def __init__(self, slow_threshold_seconds: float = 2.0):
        self.slow_threshold = slow_threshold_seconds
        self._lock = threading.Lock()
        self.reset()

    def reset(self):
        with self._lock:
            self.total_requests = 0
            self.slow_requests = 0
            self.total_response_time = 0.0
            self.status_classes: Counter = Counter()
            self.errors_by_kind: Counter = Counter()

    def record_request(self, endpoint: str, response_time: float, status_code: int):
        slow = response_time > self.slow_threshold
        with self._lock:
            self.total_requests += 1
            self.total_response_time += response_time
            self.status_classes[f"{status_code // 100}xx"] += 1
            if slow:
                self.slow_requests += 1

        if slow:
            logger.warning("Slow request",
                           endpoint=endpoint,
                           response_time=round(response_time, 3),
                           threshold=self.slow_threshold)

    def record_error(self, kind: str):
        """Count a request that failed with an EstateMapException of this kind"""
        with self._lock:
            self.errors_by_kind[kind] += 1

    def report(self) -> Dict[str, Any]:
        with self._lock:
            average = (self.total_response_time / self.total_requests
                       if self.total_requests else 0.0)
            return {
                'total_requests': self.total_requests,
                'average_response_time': round(average, 3),
                'slow_requests': self.slow_requests,
                'slow_threshold': self.slow_threshold,
                'responses': dict(self.status_classes),
                'errors': dict(self.errors_by_kind),
                'timestamp': datetime.now(timezone.utc).isoformat()
            }


def add_performance_monitoring(app, slow_threshold_seconds: float) -> RequestMonitor:
    """Time every request and expose the monitor as app.monitor"""
    from flask import request, g

    monitor = RequestMonitor(slow_threshold_seconds)
    app.monitor = monitor

    @app.before_request
    def start_timer():
        g.start_time = time.perf_counter()

    @app.after_request
    def record_timing(response):
        if 'start_time' in g:
            response_time = time.perf_counter() - g.start_time
            monitor.record_request(request.endpoint or request.path,
                                   response_time, response.status_code)
            response.headers['X-Response-Time'] = f"{response_time:.3f}s"
        return response

    return monitor
