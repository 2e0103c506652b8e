"""quantsim.core.log

Logging setup. Library modules only call ``logging.getLogger(__name__)``;
applications call :func:`configure_logging` once.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

from quantsim.core.config import LoggingConfig

_HANDLER_NAME = "quantsim"


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True)


def configure_logging(cfg: LoggingConfig | None = None) -> logging.Logger:
    """Attach a single stream handler to the ``quantsim`` logger.

    Safe to call repeatedly; the previous quantsim handler is replaced.
    """

    cfg = cfg or LoggingConfig()
    root = logging.getLogger("quantsim")
    root.setLevel(cfg.level.upper())

    for h in list(root.handlers):
        if h.get_name() == _HANDLER_NAME:
            root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if cfg.json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    return root
