from __future__ import annotations

import logging
import os
from pathlib import Path


def setup_logging() -> None:
    level = logging.DEBUG if os.getenv("RUNNER_DEBUG") == "1" else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_file = os.getenv("MENTION_DISPATCH_LOG_FILE", "")
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(message)s",
        handlers=handlers,
    )


def redact(text: str, *secrets: str) -> str:
    for secret in secrets:
        if secret:
            text = text.replace(secret, "[REDACTED]")
    return text
