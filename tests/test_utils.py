import logging

import pytest

from fretfind.utils import performance_logging

logger = logging.getLogger("fretfind.tests")


class TestPerformanceLogging:
    def test_logs_duration(self, caplog):
        with caplog.at_level(logging.INFO, logger=logger.name):
            with performance_logging("fret guitar", logger=logger):
                pass
        assert len(caplog.records) == 1
        assert caplog.records[0].getMessage().startswith("fret guitar took: ")

    def test_logs_rate_and_reraises(self, caplog):
        with caplog.at_level(logging.INFO, logger=logger.name):
            with pytest.raises(KeyError):
                with performance_logging("lookup", logger=logger, counter=10):
                    sum(range(10000))
                    raise KeyError("missing")
        assert "items/sec" in caplog.records[0].getMessage()

    def test_logger_is_required(self):
        with pytest.raises(TypeError):
            with performance_logging("no logger"):
                pass
