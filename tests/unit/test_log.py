from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest

from quantsim.core.config import LoggingConfig
from quantsim.core.log import JsonFormatter, configure_logging


@pytest.fixture()
def quantsim_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("quantsim")
    level, handlers = logger.level, list(logger.handlers)
    yield logger
    logger.setLevel(level)
    logger.handlers = handlers


def test_configure_logging_is_idempotent(quantsim_logger: logging.Logger) -> None:
    configure_logging(LoggingConfig(level="debug"))
    configure_logging(LoggingConfig(level="warning", json_output=True))

    ours = [h for h in quantsim_logger.handlers if h.get_name() == "quantsim"]
    assert len(ours) == 1
    assert isinstance(ours[0].formatter, JsonFormatter)
    assert quantsim_logger.level == logging.WARNING


def test_json_formatter_one_object_per_record() -> None:
    record = logging.LogRecord("quantsim.test", logging.INFO, __file__, 1, "final value %.2f", (101.5,), None)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "final value 101.50"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "quantsim.test"
