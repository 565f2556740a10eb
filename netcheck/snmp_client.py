"""
SNMP client abstraction.

We support two modes:

1. Real SNMP (using pysnmp's asyncio API), when USE_SNMP_STUB=0.
2. Stub mode: serve realistic-looking IF-MIB tables from memory.

Both clients are reached through a `RequestContext`, which carries the
device connection and a cancellation event for the current request.
Every SNMP operation races against that event.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, Optional, TypeVar, Union

from pysnmp.hlapi.v3arch.asyncio import (
    CommunityData,
    ContextData,
    ObjectIdentity,
    ObjectType,
    SnmpEngine,
    UdpTransportTarget,
    get_cmd,
    walk_cmd,
)
from pysnmp.proto import rfc1902, rfc1905

from netcheck.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

SnmpValue = Union[int, float, bytes, str, None]


class SnmpError(Exception):
    """Raised when SNMP retrieval fails."""


class SnmpCancelledError(SnmpError):
    """Raised when the request context is cancelled during an SNMP operation."""


class NoConnectionError(SnmpError):
    """Raised when the request context carries no SNMP connection."""


def normalize_oid(oid: str) -> str:
    """Strip the leading dot so ".1.3.6" and "1.3.6" compare equal."""
    return oid.lstrip(".")


def _oid_key(oid: str) -> tuple:
    return tuple(int(part) for part in normalize_oid(oid).split("."))


@dataclass
class SnmpVariable:
    """One (OID, value) binding of an SNMP response."""

    oid: str
    value: SnmpValue

    @classmethod
    def from_var_bind(cls, oid: Any, value: Any) -> "SnmpVariable":
        """Convert a pysnmp var-bind into plain Python values."""
        if isinstance(value, (rfc1905.NoSuchObject, rfc1905.NoSuchInstance, rfc1905.EndOfMibView)):
            converted: SnmpValue = None
        elif isinstance(value, rfc1902.OctetString):
            converted = bytes(value.asOctets())
        elif isinstance(value, rfc1902.ObjectName):
            converted = str(value)
        else:
            try:
                converted = int(value)
            except (TypeError, ValueError):
                converted = str(value)
        return cls(oid=normalize_oid(str(oid)), value=converted)

    def value_string(self) -> str:
        if self.value is None:
            raise SnmpError(f"no value available for oid {self.oid}")
        if isinstance(self.value, bytes):
            try:
                return self.value.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise SnmpError(f"value of oid {self.oid} is not a valid string") from exc
        return str(self.value)

    def index(self, base_oid: str) -> str:
        """Return the table index part of this OID below `base_oid`."""
        return normalize_oid(self.oid)[len(normalize_oid(base_oid)) + 1:]


@dataclass
class RequestContext:
    """Per-request context: the device connection plus a cancellation event."""

    connection: Optional["DeviceConnection"] = None
    cancelled: asyncio.Event = field(default_factory=asyncio.Event)

    def cancel(self) -> None:
        self.cancelled.set()

    def close(self) -> None:
        """Cancel pending operations and release the device connection."""
        self.cancel()
        if self.connection is not None:
            self.connection.close()


async def run_cancellable(ctx: RequestContext, operation: Awaitable[T]) -> T:
    """
    Await `operation`, failing with SnmpCancelledError as soon as the
    context's cancellation event is set.
    """
    if ctx.cancelled.is_set():
        if asyncio.iscoroutine(operation):
            operation.close()
        raise SnmpCancelledError("context cancelled")

    task = asyncio.ensure_future(operation)
    waiter = asyncio.ensure_future(ctx.cancelled.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not task.done():
            task.cancel()

    if task not in done:
        raise SnmpCancelledError("context cancelled")
    return task.result()


# ---------------------------------------------------------------------------
# Real SNMP implementation
# ---------------------------------------------------------------------------


class SnmpClient:
    """SNMP v1/v2c client on top of pysnmp's asyncio high-level API."""

    def __init__(
        self,
        host: str,
        community: str = "public",
        port: int = 161,
        version: str = "2c",
        timeout: float = 1.0,
        retries: int = 1,
    ):
        self.host = host
        self.community = community
        self.port = port
        self.version = version
        self.timeout = timeout
        self.retries = retries
        self._engine: Optional[SnmpEngine] = None

    def _snmp_engine(self) -> SnmpEngine:
        if self._engine is None:
            self._engine = SnmpEngine()
        return self._engine

    def close(self) -> None:
        """Close the engine's transport dispatcher and its UDP socket."""
        if self._engine is not None:
            self._engine.close_dispatcher()
            self._engine = None

    def _auth(self) -> CommunityData:
        return CommunityData(self.community, mpModel=1 if self.version == "2c" else 0)

    async def _transport(self) -> UdpTransportTarget:
        return await UdpTransportTarget.create(
            (self.host, self.port), timeout=self.timeout, retries=self.retries
        )

    async def _get(self, oids: tuple) -> List[SnmpVariable]:
        errorIndication, errorStatus, errorIndex, varBinds = await get_cmd(
            self._snmp_engine(),
            self._auth(),
            await self._transport(),
            ContextData(),
            *[ObjectType(ObjectIdentity(normalize_oid(oid))) for oid in oids],
        )
        if errorIndication:
            raise SnmpError(str(errorIndication))
        if errorStatus:
            msg = f"{errorStatus.prettyPrint()} at {errorIndex and varBinds[int(errorIndex) - 1][0] or '?'}"
            raise SnmpError(msg)
        return [SnmpVariable.from_var_bind(oid, value) for oid, value in varBinds]

    async def _walk(self, oid: str) -> List[SnmpVariable]:
        result = []
        async for errorIndication, errorStatus, errorIndex, varBinds in walk_cmd(
            self._snmp_engine(),
            self._auth(),
            await self._transport(),
            ContextData(),
            ObjectType(ObjectIdentity(normalize_oid(oid))),
            lexicographicMode=False,
        ):
            if errorIndication:
                raise SnmpError(str(errorIndication))
            if errorStatus:
                raise SnmpError(f"{errorStatus.prettyPrint()} while walking {oid}")
            result.extend(SnmpVariable.from_var_bind(name, value) for name, value in varBinds)
        return result

    async def get(self, ctx: RequestContext, *oids: str) -> List[SnmpVariable]:
        """Perform one SNMP GET for the given OIDs."""
        logger.debug("snmp get %s on %s:%s", oids, self.host, self.port)
        return await run_cancellable(ctx, self._get(oids))

    async def walk(self, ctx: RequestContext, oid: str) -> List[SnmpVariable]:
        """Walk the subtree below `oid`; an empty list if it does not exist."""
        logger.debug("snmp walk %s on %s:%s", oid, self.host, self.port)
        return await run_cancellable(ctx, self._walk(oid))


# ---------------------------------------------------------------------------
# Stub implementation: in-memory MIB for demo purposes and tests
# ---------------------------------------------------------------------------


class StubSnmpClient:
    """Serves GET and WALK requests from an `{oid: value}` mapping."""

    def __init__(self, data: Dict[str, SnmpValue]):
        self.data = {normalize_oid(oid): value for oid, value in data.items()}

    def close(self) -> None:
        pass

    async def _get(self, oids: tuple) -> List[SnmpVariable]:
        return [SnmpVariable(normalize_oid(oid), self.data.get(normalize_oid(oid))) for oid in oids]

    async def _walk(self, oid: str) -> List[SnmpVariable]:
        prefix = normalize_oid(oid) + "."
        matches = sorted((o for o in self.data if o.startswith(prefix)), key=_oid_key)
        return [SnmpVariable(o, self.data[o]) for o in matches]

    async def get(self, ctx: RequestContext, *oids: str) -> List[SnmpVariable]:
        return await run_cancellable(ctx, self._get(oids))

    async def walk(self, ctx: RequestContext, oid: str) -> List[SnmpVariable]:
        return await run_cancellable(ctx, self._walk(oid))


def stub_device_data(if_indexes: List[int]) -> Dict[str, SnmpValue]:
    """
    Generate fake ifTable / ifXTable contents for the given interface indexes.

    Counters get random baselines so repeated checks look like live traffic.
    """
    data: Dict[str, SnmpValue] = {}
    for if_index in if_indexes:
        in_octets = random.randint(1_000_000, 10_000_000)
        out_octets = random.randint(1_000_000, 10_000_000)
        data.update({
            f"1.3.6.1.2.1.2.2.1.1.{if_index}": if_index,
            f"1.3.6.1.2.1.2.2.1.2.{if_index}": f"stub-if{if_index}".encode(),
            f"1.3.6.1.2.1.2.2.1.3.{if_index}": 6,  # ethernetCsmacd
            f"1.3.6.1.2.1.2.2.1.5.{if_index}": 100_000_000,  # 100 Mbps
            f"1.3.6.1.2.1.2.2.1.6.{if_index}": bytes([0x02, 0x00, 0x00, 0x00, 0x00, if_index % 256]),
            f"1.3.6.1.2.1.2.2.1.7.{if_index}": 1,  # up
            f"1.3.6.1.2.1.2.2.1.8.{if_index}": 1,  # up
            f"1.3.6.1.2.1.2.2.1.10.{if_index}": in_octets % 2**32,
            f"1.3.6.1.2.1.2.2.1.14.{if_index}": random.randint(0, 10),
            f"1.3.6.1.2.1.2.2.1.16.{if_index}": out_octets % 2**32,
            f"1.3.6.1.2.1.2.2.1.20.{if_index}": random.randint(0, 10),
            f"1.3.6.1.2.1.31.1.1.1.1.{if_index}": f"if{if_index}".encode(),
            f"1.3.6.1.2.1.31.1.1.1.6.{if_index}": in_octets,
            f"1.3.6.1.2.1.31.1.1.1.10.{if_index}": out_octets,
            f"1.3.6.1.2.1.31.1.1.1.18.{if_index}": b"",
        })
    return data


# ---------------------------------------------------------------------------
# Connection handle
# ---------------------------------------------------------------------------


@dataclass
class DeviceConnection:
    """Connection to one device. Only SNMP is available here."""

    snmp: Optional[Union[SnmpClient, StubSnmpClient]] = None

    def close(self) -> None:
        if self.snmp is not None:
            self.snmp.close()


def connection_from_context(ctx: RequestContext) -> DeviceConnection:
    if ctx.connection is None or ctx.connection.snmp is None:
        raise NoConnectionError("no device connection available")
    return ctx.connection


def build_connection(settings: Settings) -> DeviceConnection:
    """
    Build the device connection described by `settings`.

    - USE_SNMP_STUB=1 serves `stub_device_data(settings.stub_if_indexes)`.
    - Otherwise talk SNMP to settings.snmp_host.
    """
    if settings.use_snmp_stub:
        logger.info("using stub SNMP data for ifIndexes %s", settings.stub_if_indexes)
        return DeviceConnection(snmp=StubSnmpClient(stub_device_data(settings.stub_if_indexes)))

    return DeviceConnection(
        snmp=SnmpClient(
            host=settings.snmp_host,
            community=settings.snmp_community,
            port=settings.snmp_port,
            version=settings.snmp_version,
            timeout=settings.snmp_timeout,
            retries=settings.snmp_retries,
        )
    )
