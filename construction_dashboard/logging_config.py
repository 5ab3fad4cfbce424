# construction_dashboard/logging_config.py
"""
로깅 설정.

- text: 개발용, 사람이 읽기 쉬운 형식 (stderr)
- json: 운영용, 로그 수집기가 읽을 수 있는 JSON 한 줄 형식
"""
import json
import logging
import sys
from datetime import datetime, timezone

_EXTRA_FIELDS = ("method", "path", "status", "tenant_id", "subject", "entity_kind", "entity_id")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        for key in _EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        return json.dumps(entry, ensure_ascii=False)


class ReadableFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now().strftime("%H:%M:%S")
        base = f"{ts} {record.levelname:<8} {record.name}: {record.getMessage()}"
        if record.exc_info and record.exc_info[0] is not None:
            base += "\n" + self.formatException(record.exc_info)
        return base


def configure_logging(level: str = "INFO", fmt: str = "text") -> logging.Logger:
    """
    패키지 루트 로거에 핸들러를 설치합니다. 여러 번 호출해도 핸들러가 중복되지 않습니다.

    Args:
        level: 로그 레벨 이름 (예: 'DEBUG', 'INFO').
        fmt: 'text' 또는 'json'.
    """
    logger = logging.getLogger("construction_dashboard")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if fmt == "json" else ReadableFormatter())

    logger.handlers = [handler]
    logger.propagate = False
    return logger
