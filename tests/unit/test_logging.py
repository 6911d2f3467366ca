"""
Logging Helper Tests
"""

import json
import logging

from asta.ast import Node
from asta.compiler import compile
from asta.logging import StructuredFormatter, get_logger, setup_logger


class TestGetLogger:
    """Logger naming"""

    def test_child_logger(self):
        assert get_logger("parsing").name == "asta.parsing"

    def test_default_logger(self):
        assert get_logger().name == "asta"


class TestSetupLogger:
    """Handler installation"""

    def test_single_handler(self):
        logger = setup_logger("asta.test_setup", level=logging.DEBUG)
        setup_logger("asta.test_setup", level=logging.DEBUG)

        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG

    def test_structured_handler(self):
        logger = setup_logger("asta.test_structured", structured=True)

        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)


class TestStructuredFormatter:
    """JSON output"""

    def test_format(self):
        record = logging.LogRecord("asta.compiler", logging.DEBUG, __file__, 1, "Compiled %s", ("x",), None)

        data = json.loads(StructuredFormatter().format(record))

        assert data["level"] == "DEBUG"
        assert data["logger"] == "asta.compiler"
        assert data["message"] == "Compiled x"

    def test_compile_logs_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="asta"):
            compile(Node("int", (1,)))

        assert any(record.name == "asta.compiler" for record in caplog.records)
