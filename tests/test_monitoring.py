"""Tests for the monitoring-plugin result accumulator."""
from __future__ import annotations

import pytest

from netcheck.monitoring import (
    MonitoringResponse,
    PerformanceDataError,
    PerformanceDataPoint,
    Status,
)


class TestStatus:
    def test_exit_codes(self):
        assert [int(s) for s in (Status.OK, Status.WARNING, Status.CRITICAL, Status.UNKNOWN)] == [0, 1, 2, 3]

    def test_worst_status_wins(self):
        mon = MonitoringResponse()

        mon.update_status(Status.CRITICAL, "disk full")
        mon.update_status(Status.WARNING, "slow")
        mon.update_status(Status.OK, "fine")

        assert mon.get_status_code() == 2
        assert mon.get_output() == "CRITICAL: disk full"

    def test_messages_of_final_level_are_joined(self):
        mon = MonitoringResponse()

        mon.update_status(Status.WARNING, "a")
        mon.update_status(Status.WARNING, "b")

        assert mon.get_output() == "WARNING: a; b"

    def test_default_message(self):
        assert MonitoringResponse().get_output() == "OK: check ok"
        assert MonitoringResponse(default_ok_message="all good").get_output() == "OK: all good"

    def test_update_status_on_error_without_error(self):
        mon = MonitoringResponse()

        assert mon.update_status_on_error(None, Status.UNKNOWN, "failed", True) is False
        assert mon.get_status_code() == 0

    def test_update_status_on_error(self):
        mon = MonitoringResponse()

        assert mon.update_status_on_error(ValueError("bad value"), Status.UNKNOWN, "failed", True) is True
        assert mon.update_status_on_error(ValueError("other"), Status.WARNING, "warned", False) is False
        assert mon.get_status_code() == 3
        assert mon.get_output() == "UNKNOWN: failed: bad value"


class TestPerformanceData:
    def test_render(self):
        mon = MonitoringResponse()

        mon.add_performance_data_point(PerformanceDataPoint.create("traffic_counter_in", 10, "B", "eth0"))
        mon.add_performance_data_point(PerformanceDataPoint.create("uptime", 5, "s"))

        assert mon.get_output() == "OK: check ok | 'traffic_counter_in_eth0'=10B;;;; 'uptime'=5s;;;;"

    def test_duplicate_rejected(self):
        mon = MonitoringResponse()
        mon.add_performance_data_point(PerformanceDataPoint.create("m", 1, "c", "a"))

        with pytest.raises(PerformanceDataError, match="already exists"):
            mon.add_performance_data_point(PerformanceDataPoint.create("m", 2, "c", "a"))

        mon.add_performance_data_point(PerformanceDataPoint.create("m", 2, "c", "b"))
        assert len(mon.performance_data) == 2

    @pytest.mark.parametrize(
        "metric, unit, label",
        [("", "c", ""), ("m'x", "c", ""), ("m", "bits", ""), ("m", "c", "a=b")],
    )
    def test_invalid_point(self, metric, unit, label):
        with pytest.raises(PerformanceDataError, match="invalid performance data point"):
            PerformanceDataPoint.create(metric, 1, unit, label)

    def test_print_performance_data_disabled(self):
        mon = MonitoringResponse()
        mon.add_performance_data_point(PerformanceDataPoint.create("m", 1, "c"))

        mon.print_performance_data(False)
        info = mon.get_info()

        assert info.raw_output == "OK: check ok"
        assert info.performance_data == []
        assert len(mon.performance_data) == 1

    def test_get_info(self):
        mon = MonitoringResponse()
        mon.add_performance_data_point(PerformanceDataPoint.create("rx_level", -3.5, "", "eth0"))
        mon.update_status(Status.WARNING, "low signal")

        info = mon.get_info()

        assert info.status_code == 1
        assert info.raw_output == "WARNING: low signal | 'rx_level_eth0'=-3.5;;;;"
        assert [(p.metric, p.value) for p in info.performance_data] == [("rx_level", -3.5)]
