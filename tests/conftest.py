"""Root conftest: shared fixtures for all tests."""
from __future__ import annotations

import os
from typing import List, Optional

import pytest

# Never talk to a real device from the test suite
os.environ.setdefault("USE_SNMP_STUB", "1")

from netcheck.communicator import COMMUNICATORS  # noqa: E402
from netcheck.models import Interface  # noqa: E402
from netcheck.snmp_client import DeviceConnection, RequestContext, StubSnmpClient  # noqa: E402


class FakeCommunicator:
    """Interface reader that returns whatever the test put into `interfaces`."""

    device_class = "test"
    interfaces: List[Interface] = []
    error: Optional[Exception] = None

    async def get_interfaces(self, ctx: RequestContext) -> List[Interface]:
        if self.error is not None:
            raise self.error
        return [interface.model_copy() for interface in self.interfaces]


@pytest.fixture
def fake_device(monkeypatch) -> type:
    """Register device class "test"; set `.interfaces` / `.error` on the returned class."""
    monkeypatch.setattr(FakeCommunicator, "interfaces", [])
    monkeypatch.setattr(FakeCommunicator, "error", None)
    monkeypatch.setitem(COMMUNICATORS, "test", FakeCommunicator)
    return FakeCommunicator


def stub_context(data: dict) -> RequestContext:
    """RequestContext backed by an in-memory MIB."""
    return RequestContext(connection=DeviceConnection(snmp=StubSnmpClient(data)))


@pytest.fixture
def ctx() -> RequestContext:
    """Context with an empty stub device."""
    return stub_context({})


def points(performance_data) -> list:
    """Performance data as comparable (metric, value, unit, label) tuples."""
    return [(p.metric, p.value, p.unit, p.label) for p in performance_data]
