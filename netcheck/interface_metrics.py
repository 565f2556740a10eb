"""
Interface-metrics check.

Reads all interfaces of a device, drops the filtered interface types and
emits one performance-data point per available counter, tagged with the
interface description (ifDescr).

Pipeline:
1. ReadInterfacesRequest against the same device
2. filter_interfaces()            - exclude ifType values
3. optional identity list as OK status message
4. reconcile_interface_labels()   - make ifDescr unique
5. add_interface_performance_data() - project INTERFACE_METRICS
"""

import logging
from typing import List, Optional, Sequence, Tuple, Union

from pydantic import Field, TypeAdapter
from pydantic_core import PydanticSerializationError

from netcheck.models import AdminStatus, Interface, OperStatus
from netcheck.monitoring import MonitoringResponse, PerformanceDataPoint, Status
from netcheck.request import BaseRequest, CheckResponse, ReadInterfacesRequest, ReadInterfacesResponse
from netcheck.schemas import InterfaceCheckOutput
from netcheck.snmp_client import RequestContext

logger = logging.getLogger(__name__)


class InterfaceMetricsError(Exception):
    """Raised when interface data cannot be turned into performance data."""


class InterfaceLabelError(InterfaceMetricsError):
    """Raised when interfaces cannot be given unique labels."""


# (metric, Interface fields in order of preference, unit)
# Where a 64-bit HC counter exists it comes first; the 32-bit counter is
# only used when the HC counter is absent.
INTERFACE_METRICS: List[Tuple[str, Tuple[str, ...], str]] = [
    ("error_counter_in", ("if_in_errors",), "c"),
    ("error_counter_out", ("if_out_errors",), "c"),
    ("packet_counter_discard_in", ("if_in_discards",), "c"),
    ("packet_counter_discard_out", ("if_out_discards",), "c"),
    ("interface_admin_status", ("if_admin_status",), ""),
    ("interface_oper_status", ("if_oper_status",), ""),
    ("traffic_counter_in", ("if_hc_in_octets", "if_in_octets"), "B"),
    ("traffic_counter_out", ("if_hc_out_octets", "if_out_octets"), "B"),
    ("packet_counter_unicast_in", ("if_hc_in_ucast_pkts", "if_in_ucast_pkts"), "c"),
    ("packet_counter_unicast_out", ("if_hc_out_ucast_pkts", "if_out_ucast_pkts"), "c"),
    ("packet_counter_multicast_in", ("if_hc_in_multicast_pkts", "if_in_multicast_pkts"), "c"),
    ("packet_counter_multicast_out", ("if_hc_out_multicast_pkts", "if_out_multicast_pkts"), "c"),
    ("packet_counter_broadcast_in", ("if_hc_in_broadcast_pkts", "if_in_broadcast_pkts"), "c"),
    ("packet_counter_broadcast_out", ("if_hc_out_broadcast_pkts", "if_out_broadcast_pkts"), "c"),
    ("interface_maxspeed_in", ("if_speed",), "B"),
    ("interface_maxspeed_out", ("if_speed",), "B"),
    # EtherLike-MIB / RMON
    ("error_counter_alignment_errors", ("dot3_stats_alignment_errors",), "c"),
    ("error_counter_FCSErrors", ("dot3_stats_fcs_errors",), "c"),
    ("error_counter_single_collision_frames", ("dot3_stats_single_collision_frames",), "c"),
    ("error_counter_multiple_collision_frames", ("dot3_stats_multiple_collision_frames",), "c"),
    ("error_counter_SQETest_errors", ("dot3_stats_sqe_test_errors",), "c"),
    ("error_counter_deferred_transmissions", ("dot3_stats_deferred_transmissions",), "c"),
    ("error_counter_late_collisions", ("dot3_stats_late_collisions",), "c"),
    ("error_counter_excessive_collisions", ("dot3_stats_excessive_collisions",), "c"),
    ("error_counter_internal_mac_transmit_errors", ("dot3_stats_internal_mac_transmit_errors",), "c"),
    ("error_counter_carrier_sense_errors", ("dot3_stats_carrier_sense_errors",), "c"),
    ("error_counter_frame_too_longs", ("dot3_stats_frame_too_longs",), "c"),
    ("error_counter_internal_mac_receive_errors", ("dot3_stats_internal_mac_receive_errors",), "c"),
    ("error_counter_dot3HCStatsFCSErrors", ("dot3_hc_stats_fcs_errors",), "c"),
    ("error_counter_CRCAlign_errors", ("ether_stats_crc_align_errors",), "c"),
    # radio
    ("interface_level_out", ("level_out",), ""),
    ("interface_level_in", ("level_in",), ""),
    ("interface_maxbitrate_out", ("maxbitrate_out",), "B"),
    ("interface_maxbitrate_in", ("maxbitrate_in",), "B"),
    # DWDM
    ("rx_level", ("rx_level",), ""),
    ("tx_level", ("tx_level",), ""),
]

_STATUS_NAMES = {"if_admin_status": "admin", "if_oper_status": "oper"}

_interface_list_adapter = TypeAdapter(List[InterfaceCheckOutput])


def filter_interfaces(interfaces: List[Interface], filters: Sequence[str]) -> List[Interface]:
    """
    Drop interfaces whose ifType matches a filter.

    Each filter is applied to the full interface list on its own and the
    results are concatenated, so with several filters an interface is kept
    once per filter it does not match. Interfaces without ifType are always
    kept.
    """
    if not filters:
        return interfaces

    result = []
    for type_filter in filters:
        for interface in interfaces:
            if interface.if_type is None or interface.if_type != type_filter:
                result.append(interface.model_copy())
    return result


def reconcile_interface_labels(interfaces: List[Interface]) -> None:
    """
    Rewrite ifDescr in place so that no two interfaces share one.

    - no or empty ifDescr: ifDescr becomes the ifIndex
    - duplicate ifDescr: every interface carrying it, including the first
      one, gets " <ifIndex>" appended

    The first interface with a description is rewritten at most once, when
    the first duplicate shows up. Descriptions derived from ifIndex are not
    checked against the others.
    """
    first_seen: dict = {}

    for interface in interfaces:
        if not interface.if_descr:
            if interface.if_index is None:
                raise InterfaceLabelError("interface does not have an ifDescr and ifIndex")
            interface.if_descr = str(interface.if_index)
            continue

        descr = interface.if_descr
        if descr not in first_seen:
            first_seen[descr] = interface
            continue

        first: Optional[Interface] = first_seen[descr]
        if first is not None:
            if first.if_index is None:
                raise InterfaceLabelError("interface does not have an ifIndex, but ifDescr is a duplicate")
            first.if_descr = f"{first.if_descr} {first.if_index}"
            first_seen[descr] = None

        if interface.if_index is None:
            raise InterfaceLabelError("interface does not have an ifIndex, but ifDescr is a duplicate")
        interface.if_descr = f"{descr} {interface.if_index}"


def _metric_value(interface: Interface, fields: Tuple[str, ...]) -> Optional[Union[int, float]]:
    for field in fields:
        value = getattr(interface, field)
        if value is None:
            continue
        if isinstance(value, (AdminStatus, OperStatus)):
            try:
                return value.to_status_code()
            except ValueError as exc:
                raise InterfaceMetricsError(f"failed to convert {_STATUS_NAMES[field]} status: {exc}") from exc
        return value
    return None


def add_interface_performance_data(interfaces: List[Interface], mon: MonitoringResponse) -> None:
    """
    Add the performance data of all interfaces to `mon`, one point per
    INTERFACE_METRICS row whose source field is present.

    Stops at the first error; points added before stay in `mon`.
    """
    reconcile_interface_labels(interfaces)

    for interface in interfaces:
        for metric, fields, unit in INTERFACE_METRICS:
            value = _metric_value(interface, fields)
            if value is None:
                continue
            mon.add_performance_data_point(PerformanceDataPoint.create(metric, value, unit, interface.if_descr))


def interfaces_json(interfaces: List[Interface]) -> str:
    views = [InterfaceCheckOutput.from_interface(interface) for interface in interfaces]
    return _interface_list_adapter.dump_json(views, by_alias=True).decode()


class CheckInterfaceMetricsRequest(BaseRequest):
    filter: List[str] = Field(default_factory=list)
    print_interfaces: bool = False

    def _abort(self, mon: MonitoringResponse, exc: Exception, message: str) -> CheckResponse:
        logger.warning("%s: %s: %s", self.device_class, message, exc)
        mon.update_status_on_error(exc, Status.UNKNOWN, message, True)
        mon.print_performance_data(False)
        return CheckResponse.from_monitoring(mon)

    async def _get_data(self, ctx: RequestContext) -> ReadInterfacesResponse:
        response = await ReadInterfacesRequest(device_class=self.device_class).process(ctx)
        response.interfaces = filter_interfaces(response.interfaces, self.filter)
        return response

    async def process(self, ctx: RequestContext, mon: MonitoringResponse) -> CheckResponse:
        try:
            response = await self._get_data(ctx)
        except Exception as exc:
            return self._abort(mon, exc, "error while processing read interfaces request")

        if self.print_interfaces:
            try:
                output = interfaces_json(response.interfaces)
            except (PydanticSerializationError, ValueError) as exc:
                return self._abort(mon, exc, "error while marshalling output")
            mon.update_status(Status.OK, output)

        try:
            add_interface_performance_data(response.interfaces, mon)
        except Exception as exc:
            return self._abort(mon, exc, "error while adding performance data")

        return CheckResponse.from_monitoring(mon)
