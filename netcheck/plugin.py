"""
Command-line check plugin.

This module:
- connects to the configured device (stub or real SNMP)
- runs the interface-metrics check once
- prints the monitoring-plugin output and exits with its status code

Run it as:

    $env:USE_SNMP_STUB="1"
    python -m netcheck.plugin

or against a real device:

    $env:USE_SNMP_STUB="0"
    $env:SNMP_HOST="192.0.2.10"
    $env:INTERFACE_FILTER="softwareLoopback"
    python -m netcheck.plugin
"""

import asyncio
import logging
import sys

from netcheck.config import Settings, settings
from netcheck.interface_metrics import CheckInterfaceMetricsRequest
from netcheck.monitoring import MonitoringResponse
from netcheck.request import CheckResponse
from netcheck.snmp_client import RequestContext, build_connection

logger = logging.getLogger(__name__)


async def run_check(settings: Settings) -> CheckResponse:
    """Run the interface-metrics check described by `settings` once."""
    request = CheckInterfaceMetricsRequest(
        device_class=settings.device_class,
        filter=settings.interface_filter,
        print_interfaces=settings.print_interfaces,
    )
    ctx = RequestContext(connection=build_connection(settings))
    try:
        return await request.process(ctx, MonitoringResponse())
    finally:
        ctx.close()


def main() -> int:
    # stdout belongs to the plugin output
    logging.basicConfig(level=settings.log_level, stream=sys.stderr)
    logger.debug("checking %s (%s)", settings.snmp_host, settings.device_class)

    response = asyncio.run(run_check(settings))
    print(response.raw_output)
    return response.status_code


if __name__ == "__main__":
    sys.exit(main())
