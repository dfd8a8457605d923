import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger("mistral_chat")


class JsonFormatter(logging.Formatter):
    def __init__(self, redact_content: bool = False):
        super().__init__()
        self._redact = redact_content

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        if self._redact:
            msg = (msg or "")[:64]
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "msg": msg,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        return json.dumps(payload, ensure_ascii=False)


def get_logger(name: str) -> logging.Logger:
    """返回 mistral_chat 下的子 logger。"""
    return logger.getChild(name)


def setup_logger(settings) -> logging.Logger:
    logger.setLevel(getattr(logging, str(settings.log_level).upper(), logging.INFO))
    if not settings.log_dir:
        return logger
    log_dir = Path(settings.log_dir)
    log_path = Path(os.path.abspath(log_dir / "mistral_chat.log"))
    for handler in logger.handlers:
        # 重复调用不重复挂载同一个文件
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == log_path:
            return logger
    log_dir.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logger.level)
    fh.setFormatter(JsonFormatter(redact_content=settings.log_redact_content))
    logger.addHandler(fh)
    return logger
