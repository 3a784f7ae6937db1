"""
=============================================================================
ACCESS LOG
=============================================================================

One line per routed request on the "userapi.access" logger.

    text:  10.0.0.5 - - [18/Oct/2026:10:15:32 +0000] "GET /user/1" 200 40 1.84ms

    json:  {"method": "GET", "path": "/user/1", "client_ip": "10.0.0.5",
            "user_agent": "curl/8.0", "status_code": 200, "body_bytes": 40,
            "duration_ms": 1.84, "timestamp": "18/Oct/2026:10:15:32 +0000"}

Bodies are left out: they carry names and email addresses.

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass, asdict

from .base import Middleware, CallNext
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


access_logger = logging.getLogger("userapi.access")


@dataclass
class AccessEntry:
    method: str
    path: str
    client_ip: str
    user_agent: str
    status_code: int
    body_bytes: int
    duration_ms: float
    timestamp: str

    def as_json(self) -> str:
        return json.dumps(asdict(self))

    def as_text(self) -> str:
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.body_bytes} {self.duration_ms:.2f}ms'
        )


class AccessLogMiddleware(Middleware):
    """
    Times each request and writes its access line.

    Goes outermost so the timing covers routing and the store call.
    """

    def __init__(self, log_format: str = "text", level: int = logging.INFO):
        self.log_format = log_format
        self.level = level

    def process(self, request: HTTPRequest, call_next: CallNext) -> HTTPResponse:
        started = time.perf_counter()
        try:
            response = call_next(request)
        except Exception as e:
            access_logger.error(
                f'"{request.method} {request.path}" failed: {type(e).__name__}: {e}'
            )
            raise

        entry = AccessEntry(
            method=request.method,
            path=request.path,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            body_bytes=len(response.body),
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        line = entry.as_json() if self.log_format == "json" else entry.as_text()
        access_logger.log(self.level, line)
        return response
