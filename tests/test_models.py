"""Tests for the domain models and configuration."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from netcheck import models
from netcheck.config import Settings
from netcheck.models import AdminStatus, Interface, OperStatus


class TestStatusEnums:
    @pytest.mark.parametrize(
        "status, code",
        [(AdminStatus.UP, 1), (AdminStatus.DOWN, 2), (AdminStatus.TESTING, 3)],
    )
    def test_admin_status_codes(self, status, code):
        assert status.to_status_code() == code
        assert AdminStatus.from_snmp_value(code) is status

    @pytest.mark.parametrize(
        "status, code",
        [
            (OperStatus.UP, 1),
            (OperStatus.DOWN, 2),
            (OperStatus.TESTING, 3),
            (OperStatus.UNKNOWN, 4),
            (OperStatus.DORMANT, 5),
            (OperStatus.NOT_PRESENT, 6),
            (OperStatus.LOWER_LAYER_DOWN, 7),
        ],
    )
    def test_oper_status_codes(self, status, code):
        assert status.to_status_code() == code
        assert OperStatus.from_snmp_value(code) is status

    def test_unknown_wire_values(self):
        with pytest.raises(ValueError, match="unknown admin status value 4"):
            AdminStatus.from_snmp_value(4)
        with pytest.raises(ValueError, match="unknown oper status value 0"):
            OperStatus.from_snmp_value(0)

    def test_missing_status_code(self, monkeypatch):
        monkeypatch.delitem(models._ADMIN_STATUS_CODES, AdminStatus.TESTING)

        with pytest.raises(ValueError, match="unknown status value 'testing'"):
            AdminStatus.TESTING.to_status_code()


class TestInterface:
    def test_populate_by_mib_name(self):
        interface = Interface.model_validate(
            {"ifIndex": 1, "ifDescr": "eth0", "ifHCInOctets": 5, "ifOperStatus": "lowerLayerDown"}
        )

        assert interface.if_index == 1
        assert interface.if_descr == "eth0"
        assert interface.if_hc_in_octets == 5
        assert interface.if_oper_status is OperStatus.LOWER_LAYER_DOWN
        assert interface.if_in_octets is None

    def test_dump_uses_mib_names(self):
        dumped = Interface(if_index=3, dot3_hc_stats_fcs_errors=1).model_dump(by_alias=True, exclude_none=True)

        assert dumped == {"ifIndex": 3, "dot3HCStatsFCSErrors": 1}

    def test_invalid_status(self):
        with pytest.raises(ValidationError):
            Interface(if_admin_status="sleeping")


class TestSettings:
    def test_comma_separated_lists(self):
        settings = Settings(interface_filter="ethernetCsmacd, softwareLoopback", stub_if_indexes="1,2,3")

        assert settings.interface_filter == ["ethernetCsmacd", "softwareLoopback"]
        assert settings.stub_if_indexes == [1, 2, 3]

    def test_scalar_if_index(self):
        assert Settings(stub_if_indexes=4).stub_if_indexes == [4]

    def test_lists_from_environment(self, monkeypatch):
        monkeypatch.setenv("INTERFACE_FILTER", "propVirtual")
        monkeypatch.setenv("STUB_IF_INDEXES", "5,6")
        monkeypatch.setenv("PRINT_INTERFACES", "1")

        settings = Settings()

        assert settings.interface_filter == ["propVirtual"]
        assert settings.stub_if_indexes == [5, 6]
        assert settings.print_interfaces is True

    def test_invalid_snmp_version(self):
        with pytest.raises(ValidationError):
            Settings(snmp_version="3")
