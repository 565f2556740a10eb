"""
FastAPI application exposing device checks and reads.

Endpoints
---------
- GET  /health                   -> Simple liveness check
- POST /read/interfaces          -> All interfaces of the device
- POST /read/ups                 -> UPS mains voltage state
- POST /check/interface-metrics  -> Monitoring-plugin result with interface performance data
"""

import logging
from typing import AsyncIterator

from fastapi import Depends, FastAPI, HTTPException

from netcheck.communicator import UnknownDeviceClassError, UnsupportedCapabilityError
from netcheck.config import settings
from netcheck.interface_metrics import CheckInterfaceMetricsRequest
from netcheck.monitoring import MonitoringResponse
from netcheck.request import (
    BaseRequest,
    CheckResponse,
    ReadInterfacesRequest,
    ReadInterfacesResponse,
    ReadUPSRequest,
    ReadUPSResponse,
)
from netcheck.snmp_client import RequestContext, build_connection

logger = logging.getLogger(__name__)


app = FastAPI(
    title="netcheck API",
    version="0.1.0",
)


# ---------------------------------------------------------------------------
# Dependency: one request context per request
# ---------------------------------------------------------------------------

async def get_context() -> AsyncIterator[RequestContext]:
    """
    FastAPI dependency that provides the device context.

    The context is created at the start of the request and closed at the
    end, which aborts SNMP operations that are still running and releases
    the SNMP socket.
    """
    ctx = RequestContext(connection=build_connection(settings))
    try:
        yield ctx
    finally:
        ctx.close()


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/health")
def health() -> dict:
    """Simple liveness endpoint used for health checks."""
    return {"status": "ok"}


@app.post("/read/interfaces", response_model=ReadInterfacesResponse)
async def read_interfaces(request: BaseRequest, ctx: RequestContext = Depends(get_context)):
    try:
        return await ReadInterfacesRequest(device_class=request.device_class).process(ctx)
    except (UnknownDeviceClassError, UnsupportedCapabilityError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        logger.warning("read interfaces failed: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc))


@app.post("/read/ups", response_model=ReadUPSResponse)
async def read_ups(request: BaseRequest, ctx: RequestContext = Depends(get_context)):
    try:
        return await ReadUPSRequest(device_class=request.device_class).process(ctx)
    except (UnknownDeviceClassError, UnsupportedCapabilityError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        logger.warning("read ups failed: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc))


@app.post("/check/interface-metrics", response_model=CheckResponse)
async def check_interface_metrics(
    request: CheckInterfaceMetricsRequest,
    ctx: RequestContext = Depends(get_context),
):
    """
    Run the interface-metrics check.

    Always answers 200; the plugin status is `status_code` in the body.
    """
    return await request.process(ctx, MonitoringResponse())
