"""
Device communicators.

A communicator knows the OIDs and decoding rules of one device family.
Capabilities are narrow protocols; a request checks the capability it
needs with `isinstance` instead of relying on one fat base class:

- InterfaceReader:        get_interfaces(ctx) -> list[Interface]
- UPSMainsVoltageReader:  get_ups_component_mains_voltage_applied(ctx) -> bool

`get_communicator(device_class)` returns the communicator for a device
class ("generic", "powerone/acc", "powerone/pcc").
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Protocol, Tuple, runtime_checkable

from netcheck.models import AdminStatus, Interface, OperStatus
from netcheck.snmp_client import (
    NoConnectionError,
    RequestContext,
    SnmpError,
    SnmpVariable,
    connection_from_context,
    normalize_oid,
)

logger = logging.getLogger(__name__)


class CommunicatorError(Exception):
    """Raised when a communicator cannot read or decode device data."""


class UnknownDeviceClassError(CommunicatorError):
    """Raised for a device class without a registered communicator."""


class UnsupportedCapabilityError(CommunicatorError):
    """Raised when the communicator of a device class lacks a capability."""


@runtime_checkable
class InterfaceReader(Protocol):
    async def get_interfaces(self, ctx: RequestContext) -> List[Interface]:
        ...


@runtime_checkable
class UPSMainsVoltageReader(Protocol):
    async def get_ups_component_mains_voltage_applied(self, ctx: RequestContext) -> bool:
        ...


# ---------------------------------------------------------------------------
# Value decoders
# ---------------------------------------------------------------------------

# IANAifType-MIB names for the interface types seen in practice.
IF_TYPE_NAMES = {
    1: "other",
    6: "ethernetCsmacd",
    23: "ppp",
    24: "softwareLoopback",
    53: "propVirtual",
    71: "ieee80211",
    117: "gigabitEthernet",
    131: "tunnel",
    135: "l2vlan",
    136: "l3ipvlan",
    161: "ieee8023adLag",
    166: "mpls",
    188: "radioMAC",
    195: "opticalChannel",
    209: "bridge",
}


def _to_int(variable: SnmpVariable) -> int:
    if isinstance(variable.value, int):
        return variable.value
    return int(variable.value_string())


def _to_str(variable: SnmpVariable) -> str:
    # free-text columns are often Latin-1 on real devices
    if isinstance(variable.value, bytes):
        return variable.value.decode("utf-8", errors="replace")
    return variable.value_string()


def _to_if_type(variable: SnmpVariable) -> str:
    value = _to_int(variable)
    return IF_TYPE_NAMES.get(value, str(value))


def _to_phys_address(variable: SnmpVariable) -> str:
    if isinstance(variable.value, bytes):
        return ":".join(f"{b:02x}" for b in variable.value)
    return variable.value_string()


def _to_admin_status(variable: SnmpVariable) -> AdminStatus:
    return AdminStatus.from_snmp_value(_to_int(variable))


def _to_oper_status(variable: SnmpVariable) -> OperStatus:
    return OperStatus.from_snmp_value(_to_int(variable))


IF_TABLE = "1.3.6.1.2.1.2.2.1"
IF_X_TABLE = "1.3.6.1.2.1.31.1.1.1"
DOT3_STATS_TABLE = "1.3.6.1.2.1.10.7.2.1"
DOT3_HC_STATS_TABLE = "1.3.6.1.2.1.10.7.11.1"
ETHER_STATS_TABLE = "1.3.6.1.2.1.16.1.1.1"

# Columns of tables indexed by ifIndex: (column OID, Interface field, decoder)
INTERFACE_COLUMNS: List[Tuple[str, str, Callable[[SnmpVariable], Any]]] = [
    (f"{IF_TABLE}.1", "if_index", _to_int),
    (f"{IF_TABLE}.2", "if_descr", _to_str),
    (f"{IF_TABLE}.3", "if_type", _to_if_type),
    (f"{IF_TABLE}.5", "if_speed", _to_int),
    (f"{IF_TABLE}.6", "if_phys_address", _to_phys_address),
    (f"{IF_TABLE}.7", "if_admin_status", _to_admin_status),
    (f"{IF_TABLE}.8", "if_oper_status", _to_oper_status),
    (f"{IF_TABLE}.10", "if_in_octets", _to_int),
    (f"{IF_TABLE}.11", "if_in_ucast_pkts", _to_int),
    (f"{IF_TABLE}.13", "if_in_discards", _to_int),
    (f"{IF_TABLE}.14", "if_in_errors", _to_int),
    (f"{IF_TABLE}.16", "if_out_octets", _to_int),
    (f"{IF_TABLE}.17", "if_out_ucast_pkts", _to_int),
    (f"{IF_TABLE}.19", "if_out_discards", _to_int),
    (f"{IF_TABLE}.20", "if_out_errors", _to_int),
    (f"{IF_X_TABLE}.1", "if_name", _to_str),
    (f"{IF_X_TABLE}.2", "if_in_multicast_pkts", _to_int),
    (f"{IF_X_TABLE}.3", "if_in_broadcast_pkts", _to_int),
    (f"{IF_X_TABLE}.4", "if_out_multicast_pkts", _to_int),
    (f"{IF_X_TABLE}.5", "if_out_broadcast_pkts", _to_int),
    (f"{IF_X_TABLE}.6", "if_hc_in_octets", _to_int),
    (f"{IF_X_TABLE}.7", "if_hc_in_ucast_pkts", _to_int),
    (f"{IF_X_TABLE}.8", "if_hc_in_multicast_pkts", _to_int),
    (f"{IF_X_TABLE}.9", "if_hc_in_broadcast_pkts", _to_int),
    (f"{IF_X_TABLE}.10", "if_hc_out_octets", _to_int),
    (f"{IF_X_TABLE}.11", "if_hc_out_ucast_pkts", _to_int),
    (f"{IF_X_TABLE}.12", "if_hc_out_multicast_pkts", _to_int),
    (f"{IF_X_TABLE}.13", "if_hc_out_broadcast_pkts", _to_int),
    (f"{IF_X_TABLE}.18", "if_alias", _to_str),
    (f"{DOT3_STATS_TABLE}.2", "dot3_stats_alignment_errors", _to_int),
    (f"{DOT3_STATS_TABLE}.3", "dot3_stats_fcs_errors", _to_int),
    (f"{DOT3_STATS_TABLE}.4", "dot3_stats_single_collision_frames", _to_int),
    (f"{DOT3_STATS_TABLE}.5", "dot3_stats_multiple_collision_frames", _to_int),
    (f"{DOT3_STATS_TABLE}.6", "dot3_stats_sqe_test_errors", _to_int),
    (f"{DOT3_STATS_TABLE}.7", "dot3_stats_deferred_transmissions", _to_int),
    (f"{DOT3_STATS_TABLE}.8", "dot3_stats_late_collisions", _to_int),
    (f"{DOT3_STATS_TABLE}.9", "dot3_stats_excessive_collisions", _to_int),
    (f"{DOT3_STATS_TABLE}.10", "dot3_stats_internal_mac_transmit_errors", _to_int),
    (f"{DOT3_STATS_TABLE}.11", "dot3_stats_carrier_sense_errors", _to_int),
    (f"{DOT3_STATS_TABLE}.13", "dot3_stats_frame_too_longs", _to_int),
    (f"{DOT3_STATS_TABLE}.16", "dot3_stats_internal_mac_receive_errors", _to_int),
    (f"{DOT3_HC_STATS_TABLE}.2", "dot3_hc_stats_fcs_errors", _to_int),
]

# etherStatsTable has its own index; etherStatsDataSource points at ifIndex.
ETHER_STATS_DATA_SOURCE = f"{ETHER_STATS_TABLE}.2"
ETHER_STATS_CRC_ALIGN_ERRORS = f"{ETHER_STATS_TABLE}.8"


# ---------------------------------------------------------------------------
# Communicators
# ---------------------------------------------------------------------------


class GenericCommunicator:
    """Reads interfaces from the standard IF-MIB, EtherLike-MIB and RMON tables."""

    device_class = "generic"

    async def _walk(self, ctx: RequestContext, oid: str) -> List[SnmpVariable]:
        connection = connection_from_context(ctx)
        try:
            return await connection.snmp.walk(ctx, oid)
        except SnmpError as exc:
            raise CommunicatorError(f"snmpwalk of {oid} failed: {exc}") from exc

    async def get_interfaces(self, ctx: RequestContext) -> List[Interface]:
        """
        Return one Interface per ifIndex, in ascending ifIndex order.

        Columns the device does not implement leave the field unset.
        """
        try:
            connection_from_context(ctx)
        except NoConnectionError as exc:
            raise CommunicatorError(str(exc)) from exc

        rows: Dict[int, Dict[str, Any]] = {}

        for column, field, decode in INTERFACE_COLUMNS:
            for variable in await self._walk(ctx, column):
                if variable.value is None:
                    continue
                try:
                    if_index = int(variable.index(column))
                except ValueError:
                    logger.debug("skipping %s: index is not an ifIndex", variable.oid)
                    continue
                try:
                    value = decode(variable)
                except (ValueError, SnmpError) as exc:
                    raise CommunicatorError(f"failed to decode {field} of interface {if_index}: {exc}") from exc
                rows.setdefault(if_index, {"if_index": if_index})[field] = value

        for if_index, value in (await self._get_ether_stats_crc_align_errors(ctx)).items():
            if if_index in rows:
                rows[if_index]["ether_stats_crc_align_errors"] = value

        logger.debug("read %d interfaces", len(rows))
        return [Interface(**rows[if_index]) for if_index in sorted(rows)]

    async def _get_ether_stats_crc_align_errors(self, ctx: RequestContext) -> Dict[int, int]:
        if_index_column = normalize_oid(f"{IF_TABLE}.1") + "."
        if_index_by_ether_stats_index = {}
        for variable in await self._walk(ctx, ETHER_STATS_DATA_SOURCE):
            if isinstance(variable.value, str) and variable.value.startswith(if_index_column):
                tail = variable.value[len(if_index_column):]
                if tail.isdigit():
                    if_index_by_ether_stats_index[variable.index(ETHER_STATS_DATA_SOURCE)] = int(tail)

        result = {}
        for variable in await self._walk(ctx, ETHER_STATS_CRC_ALIGN_ERRORS):
            if_index = if_index_by_ether_stats_index.get(variable.index(ETHER_STATS_CRC_ALIGN_ERRORS))
            if if_index is not None and variable.value is not None:
                result[if_index] = _to_int(variable)
        return result


async def get_powerone_mains_voltage_applied(ctx: RequestContext, oid: str) -> bool:
    """
    Read the PowerOne alarm bitmask at `oid`; mains voltage is applied
    unless bit 3 (value 8) is set.
    """
    try:
        connection = connection_from_context(ctx)
    except NoConnectionError as exc:
        raise CommunicatorError(str(exc)) from exc

    try:
        response = await connection.snmp.get(ctx, oid)
    except SnmpError as exc:
        raise CommunicatorError(f"snmpget failed: {exc}") from exc

    if len(response) != 1:
        raise CommunicatorError("no or more than one snmp response available")

    try:
        value_string = response[0].value_string()
    except SnmpError as exc:
        raise CommunicatorError(f"couldn't get string value: {exc}") from exc

    try:
        value = int(value_string)
    except ValueError as exc:
        raise CommunicatorError(f"failed to parse snmp response: {exc}") from exc

    return (value & 8) == 0


class PoweroneACCCommunicator(GenericCommunicator):
    device_class = "powerone/acc"
    mains_voltage_oid = ".1.3.6.1.4.1.5961.4.3.2.0"

    async def get_ups_component_mains_voltage_applied(self, ctx: RequestContext) -> bool:
        return await get_powerone_mains_voltage_applied(ctx, self.mains_voltage_oid)


class PoweronePCCCommunicator(GenericCommunicator):
    device_class = "powerone/pcc"
    mains_voltage_oid = ".1.3.6.1.4.1.5961.3.3.2.0"

    async def get_ups_component_mains_voltage_applied(self, ctx: RequestContext) -> bool:
        return await get_powerone_mains_voltage_applied(ctx, self.mains_voltage_oid)


COMMUNICATORS = {
    cls.device_class: cls
    for cls in (GenericCommunicator, PoweroneACCCommunicator, PoweronePCCCommunicator)
}


def get_communicator(device_class: str):
    try:
        return COMMUNICATORS[device_class]()
    except KeyError:
        raise UnknownDeviceClassError(f"unknown device class {device_class!r}") from None
