"""
Requests and responses.

Every request names the device class of the target device; the device
connection itself comes from the RequestContext.
"""

import logging
from typing import List

from pydantic import BaseModel

from netcheck.communicator import (
    InterfaceReader,
    UnsupportedCapabilityError,
    UPSMainsVoltageReader,
    get_communicator,
)
from netcheck.models import Interface
from netcheck.monitoring import MonitoringResponse, OutputInfo
from netcheck.snmp_client import RequestContext

logger = logging.getLogger(__name__)


class BaseRequest(BaseModel):
    device_class: str = "generic"


class ReadInterfacesResponse(BaseModel):
    interfaces: List[Interface]


class ReadUPSResponse(BaseModel):
    mains_voltage_applied: bool


class CheckResponse(OutputInfo):
    """Result of a check request: the accumulator's snapshot."""

    @classmethod
    def from_monitoring(cls, mon: MonitoringResponse) -> "CheckResponse":
        return cls(**mon.get_info().model_dump())


class ReadInterfacesRequest(BaseRequest):
    async def process(self, ctx: RequestContext) -> ReadInterfacesResponse:
        communicator = get_communicator(self.device_class)
        if not isinstance(communicator, InterfaceReader):
            raise UnsupportedCapabilityError(f"reading interfaces is not supported for device class {self.device_class!r}")

        interfaces = await communicator.get_interfaces(ctx)
        logger.debug("%s: read %d interfaces", self.device_class, len(interfaces))
        return ReadInterfacesResponse(interfaces=interfaces)


class ReadUPSRequest(BaseRequest):
    async def process(self, ctx: RequestContext) -> ReadUPSResponse:
        communicator = get_communicator(self.device_class)
        if not isinstance(communicator, UPSMainsVoltageReader):
            raise UnsupportedCapabilityError(f"reading UPS components is not supported for device class {self.device_class!r}")

        applied = await communicator.get_ups_component_mains_voltage_applied(ctx)
        return ReadUPSResponse(mains_voltage_applied=applied)
