"""
Domain models.

- AdminStatus / OperStatus: IF-MIB interface states
- Interface: the vendor-independent per-interface record every
  communicator produces

Every Interface field is optional: `None` means the device did not report
it, which is different from a reported zero.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class AdminStatus(str, Enum):
    """ifAdminStatus (IF-MIB)."""

    UP = "up"
    DOWN = "down"
    TESTING = "testing"

    @classmethod
    def from_snmp_value(cls, value: int) -> "AdminStatus":
        try:
            return _ADMIN_STATUS_BY_SNMP_VALUE[value]
        except KeyError:
            raise ValueError(f"unknown admin status value {value!r}") from None

    def to_status_code(self) -> int:
        try:
            return _ADMIN_STATUS_CODES[self]
        except KeyError:
            raise ValueError(f"unknown status value {self.value!r}") from None


class OperStatus(str, Enum):
    """ifOperStatus (IF-MIB)."""

    UP = "up"
    DOWN = "down"
    TESTING = "testing"
    UNKNOWN = "unknown"
    DORMANT = "dormant"
    NOT_PRESENT = "notPresent"
    LOWER_LAYER_DOWN = "lowerLayerDown"

    @classmethod
    def from_snmp_value(cls, value: int) -> "OperStatus":
        try:
            return _OPER_STATUS_BY_SNMP_VALUE[value]
        except KeyError:
            raise ValueError(f"unknown oper status value {value!r}") from None

    def to_status_code(self) -> int:
        try:
            return _OPER_STATUS_CODES[self]
        except KeyError:
            raise ValueError(f"unknown status value {self.value!r}") from None


# Status codes emitted as performance data; they match the IF-MIB values.
_ADMIN_STATUS_CODES: Dict[AdminStatus, int] = {
    AdminStatus.UP: 1,
    AdminStatus.DOWN: 2,
    AdminStatus.TESTING: 3,
}

_OPER_STATUS_CODES: Dict[OperStatus, int] = {
    OperStatus.UP: 1,
    OperStatus.DOWN: 2,
    OperStatus.TESTING: 3,
    OperStatus.UNKNOWN: 4,
    OperStatus.DORMANT: 5,
    OperStatus.NOT_PRESENT: 6,
    OperStatus.LOWER_LAYER_DOWN: 7,
}

_ADMIN_STATUS_BY_SNMP_VALUE = {code: status for status, code in _ADMIN_STATUS_CODES.items()}
_OPER_STATUS_BY_SNMP_VALUE = {code: status for status, code in _OPER_STATUS_CODES.items()}


class Interface(BaseModel):
    """
    One network interface of a device.

    Fields can be populated by attribute name (`if_hc_in_octets`) or by
    MIB object name (`ifHCInOctets`); the API serialises the MIB names.
    """

    model_config = ConfigDict(populate_by_name=True)

    # Identity
    if_index: Optional[int] = Field(None, alias="ifIndex")
    if_descr: Optional[str] = Field(None, alias="ifDescr")
    if_name: Optional[str] = Field(None, alias="ifName")
    if_alias: Optional[str] = Field(None, alias="ifAlias")
    if_phys_address: Optional[str] = Field(None, alias="ifPhysAddress")
    if_type: Optional[str] = Field(None, alias="ifType")

    # Administrative and operational state
    if_admin_status: Optional[AdminStatus] = Field(None, alias="ifAdminStatus")
    if_oper_status: Optional[OperStatus] = Field(None, alias="ifOperStatus")

    # Capacity in bits per second
    if_speed: Optional[int] = Field(None, alias="ifSpeed")

    # IF-MIB counters, 32-bit and 64-bit ("HC") variants
    if_in_octets: Optional[int] = Field(None, alias="ifInOctets")
    if_hc_in_octets: Optional[int] = Field(None, alias="ifHCInOctets")
    if_out_octets: Optional[int] = Field(None, alias="ifOutOctets")
    if_hc_out_octets: Optional[int] = Field(None, alias="ifHCOutOctets")
    if_in_ucast_pkts: Optional[int] = Field(None, alias="ifInUcastPkts")
    if_hc_in_ucast_pkts: Optional[int] = Field(None, alias="ifHCInUcastPkts")
    if_out_ucast_pkts: Optional[int] = Field(None, alias="ifOutUcastPkts")
    if_hc_out_ucast_pkts: Optional[int] = Field(None, alias="ifHCOutUcastPkts")
    if_in_multicast_pkts: Optional[int] = Field(None, alias="ifInMulticastPkts")
    if_hc_in_multicast_pkts: Optional[int] = Field(None, alias="ifHCInMulticastPkts")
    if_out_multicast_pkts: Optional[int] = Field(None, alias="ifOutMulticastPkts")
    if_hc_out_multicast_pkts: Optional[int] = Field(None, alias="ifHCOutMulticastPkts")
    if_in_broadcast_pkts: Optional[int] = Field(None, alias="ifInBroadcastPkts")
    if_hc_in_broadcast_pkts: Optional[int] = Field(None, alias="ifHCInBroadcastPkts")
    if_out_broadcast_pkts: Optional[int] = Field(None, alias="ifOutBroadcastPkts")
    if_hc_out_broadcast_pkts: Optional[int] = Field(None, alias="ifHCOutBroadcastPkts")
    if_in_discards: Optional[int] = Field(None, alias="ifInDiscards")
    if_out_discards: Optional[int] = Field(None, alias="ifOutDiscards")
    if_in_errors: Optional[int] = Field(None, alias="ifInErrors")
    if_out_errors: Optional[int] = Field(None, alias="ifOutErrors")

    # EtherLike-MIB (dot3) and RMON counters
    dot3_stats_alignment_errors: Optional[int] = Field(None, alias="dot3StatsAlignmentErrors")
    dot3_stats_fcs_errors: Optional[int] = Field(None, alias="dot3StatsFCSErrors")
    dot3_stats_single_collision_frames: Optional[int] = Field(None, alias="dot3StatsSingleCollisionFrames")
    dot3_stats_multiple_collision_frames: Optional[int] = Field(None, alias="dot3StatsMultipleCollisionFrames")
    dot3_stats_sqe_test_errors: Optional[int] = Field(None, alias="dot3StatsSQETestErrors")
    dot3_stats_deferred_transmissions: Optional[int] = Field(None, alias="dot3StatsDeferredTransmissions")
    dot3_stats_late_collisions: Optional[int] = Field(None, alias="dot3StatsLateCollisions")
    dot3_stats_excessive_collisions: Optional[int] = Field(None, alias="dot3StatsExcessiveCollisions")
    dot3_stats_internal_mac_transmit_errors: Optional[int] = Field(None, alias="dot3StatsInternalMacTransmitErrors")
    dot3_stats_carrier_sense_errors: Optional[int] = Field(None, alias="dot3StatsCarrierSenseErrors")
    dot3_stats_frame_too_longs: Optional[int] = Field(None, alias="dot3StatsFrameTooLongs")
    dot3_stats_internal_mac_receive_errors: Optional[int] = Field(None, alias="dot3StatsInternalMacReceiveErrors")
    dot3_hc_stats_fcs_errors: Optional[int] = Field(None, alias="dot3HCStatsFCSErrors")
    ether_stats_crc_align_errors: Optional[int] = Field(None, alias="etherStatsCRCAlignErrors")

    # Radio interfaces
    level_in: Optional[float] = Field(None, alias="levelIn")
    level_out: Optional[float] = Field(None, alias="levelOut")
    maxbitrate_in: Optional[int] = Field(None, alias="maxbitrateIn")
    maxbitrate_out: Optional[int] = Field(None, alias="maxbitrateOut")

    # DWDM optical levels
    rx_level: Optional[float] = Field(None, alias="rxLevel")
    tx_level: Optional[float] = Field(None, alias="txLevel")
