"""
=============================================================================
ACCESS LOG
=============================================================================

One record per answered connection, written to the "wsserver.access"
logger so it can be routed separately from diagnostic logs.

    text (Apache-like, human readable):

        127.0.0.1 - - [17/Oct/2026:12:00:00 +0000] "GET /chat" 101 0 0.41ms upgrade

    json (one object per line, for log aggregators):

        {"request_id": "1f3a9c2e", "method": "GET", "target": "/chat",
         "client_ip": "127.0.0.1", "status_code": 101, ...}

Requests that failed to parse have no method or target; those fields are
logged as "-".
"""

import json
import logging
import time
from dataclasses import asdict, dataclass


logger = logging.getLogger("wsserver.access")


@dataclass
class RequestLog:
    """
    Structured log entry for one request.

    request_id:     Connection id, for correlating with debug logs
    method:         Request method, "-" if the request line was unusable
    target:         Request target, "-" if the request line was unusable
    client_ip:      Peer address
    status_code:    Status sent back
    content_length: Response body size in bytes
    duration_ms:    Time from accept to response sent
    upgraded:       True when the connection switched to WebSocket
    timestamp:      When the response was sent
    """

    request_id: str
    method: str
    target: str
    client_ip: str
    status_code: int
    content_length: int
    duration_ms: float
    upgraded: bool = False
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = time.strftime("%d/%b/%Y:%H:%M:%S %z")

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        text = (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )
        return f"{text} upgrade" if self.upgraded else text


class AccessLogger:
    """
    Emits RequestLog entries in the configured format.

        access = AccessLogger("json")
        access.log(entry)
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        if log_format not in ("text", "json"):
            raise ValueError(f"Unknown access log format: {log_format!r}")
        self.log_format = log_format
        self.log_level = log_level

    def format(self, entry: RequestLog) -> str:
        if self.log_format == "json":
            return json.dumps(entry.to_dict())
        return entry.to_text()

    def log(self, entry: RequestLog) -> None:
        logger.log(self.log_level, self.format(entry))
