"""
Tests for progress reporting and host-aware logging.
"""

import logging

import pytest
from shadecast import shadecast_logging
from shadecast.progress import ProgressReporter
from shadecast.raster import build_shadow_raster

from conftest import SF, SF_WINTER_NOON


class TestProgressReporter:
    def test_feedback_percentages(self, feedback):
        reporter = ProgressReporter(total=4, desc="Shadow raster", feedback=feedback)
        reporter.update(1)
        reporter.update(2)
        reporter.update(1)
        reporter.close()
        assert feedback.progress == [25, 75, 100]
        assert feedback.info == ["Starting: Shadow raster"]

    def test_percent_capped(self, feedback):
        reporter = ProgressReporter(total=2, feedback=feedback)
        reporter.update(5)
        assert feedback.progress == [100]

    def test_disabled_reports_nothing(self, feedback):
        reporter = ProgressReporter(total=4, desc="x", feedback=feedback, disable=True)
        reporter.update(2)
        assert reporter.current == 2
        assert feedback.progress == []
        assert feedback.info == []

    def test_updates_after_close_ignored(self, feedback):
        reporter = ProgressReporter(total=4, feedback=feedback)
        reporter.close()
        reporter.update(1)
        assert reporter.current == 0

    def test_terminal_bar(self):
        reporter = ProgressReporter(total=3, desc="tqdm")
        reporter.update(3)
        reporter.close()
        assert reporter.current == 3


class TestLogging:
    @pytest.fixture
    def logger(self):
        yield shadecast_logging.get_logger("shadecast.tests.logging")
        shadecast_logging.set_feedback(None)
        shadecast_logging.set_level(shadecast_logging.LogLevel.INFO)

    def test_registry_returns_same_logger(self, logger):
        assert shadecast_logging.get_logger("shadecast.tests.logging") is logger

    def test_forwards_to_python_logging(self, logger, caplog):
        with caplog.at_level(logging.DEBUG, logger="shadecast.tests.logging"):
            logger.info("raster done")
            logger.debug("hidden below INFO")
        assert "raster done" in caplog.text
        assert "hidden below INFO" not in caplog.text

    def test_feedback_routing(self, logger, feedback):
        shadecast_logging.set_feedback(feedback)
        logger.info("info")
        logger.warning("careful")
        logger.error("broken")
        shadecast_logging.set_level(shadecast_logging.LogLevel.DEBUG)
        logger.debug("detail")
        assert feedback.info == ["info", "WARNING: careful"]
        assert feedback.errors == ["broken"]
        assert feedback.debug == ["detail"]

    def test_level_applies_to_every_logger(self, logger, caplog):
        shadecast_logging.set_level(shadecast_logging.LogLevel.ERROR)
        with caplog.at_level(logging.DEBUG):
            logger.warning("suppressed")
            shadecast_logging.get_logger("shadecast.raster").warning("also suppressed")
        assert "suppressed" not in caplog.text

    def test_raster_build_reports_to_host(self, logger, feedback):
        shadecast_logging.set_feedback(feedback)
        build_shadow_raster(SF, 100.0, SF_WINTER_NOON, 10.0, [])
        assert any(message.startswith("Building shadow raster") for message in feedback.info)
        assert feedback.progress == []
