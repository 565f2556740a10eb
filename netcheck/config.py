"""
Configuration for the netcheck monitoring engine.

We use pydantic-settings (Pydantic v2) to load settings from:
- environment variables
- a local `.env` file in the project root
"""

from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings.

    Environment variables (with defaults):

    - SNMP_HOST:         IP/address of the SNMP device (default: 127.0.0.1)
    - SNMP_PORT:         UDP port for SNMP (default: 161)
    - SNMP_COMMUNITY:    SNMP v1/v2c community string (default: "public")
    - SNMP_VERSION:      "1" or "2c" (default: "2c")
    - SNMP_TIMEOUT:      Seconds to wait for each SNMP response (default: 1.0)
    - SNMP_RETRIES:      Retries per SNMP request (default: 1)
    - DEVICE_CLASS:      Communicator to use, e.g. "generic", "powerone/acc"
    - INTERFACE_FILTER:  Comma-separated ifType values to exclude
    - PRINT_INTERFACES:  "1" to print the interface identity list as status message
    - USE_SNMP_STUB:     "1" or "0" to toggle fake SNMP data (default: 1/True)
    - STUB_IF_INDEXES:   Comma-separated ifIndex values served by the stub (e.g. "1,2")
    - LOG_LEVEL:         Root log level (default: WARNING)
    """

    snmp_host: str = "127.0.0.1"
    snmp_port: int = 161
    snmp_community: str = "public"
    snmp_version: str = "2c"
    snmp_timeout: float = 1.0
    snmp_retries: int = 1

    device_class: str = "generic"

    # Comma-separated in the environment, so skip the JSON decoding step.
    interface_filter: Annotated[List[str], NoDecode] = Field(default_factory=list)
    print_interfaces: bool = False

    use_snmp_stub: bool = True
    stub_if_indexes: Annotated[List[int], NoDecode] = Field(default_factory=lambda: [1])

    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("snmp_version")
    @classmethod
    def check_snmp_version(cls, v: str) -> str:
        if v not in ("1", "2c"):
            raise ValueError("snmp_version must be '1' or '2c'")
        return v

    @field_validator("interface_filter", mode="before")
    @classmethod
    def parse_interface_filter(cls, v):
        """
        Allow INTERFACE_FILTER to be specified as:

        - ""                                 -> []
        - "ethernetCsmacd"                   -> ["ethernetCsmacd"]
        - "ethernetCsmacd,softwareLoopback"  -> ["ethernetCsmacd", "softwareLoopback"]
        """
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v

    @field_validator("stub_if_indexes", mode="before")
    @classmethod
    def parse_if_indexes(cls, v):
        """
        Allow STUB_IF_INDEXES to be specified as:

        - "1"            -> [1]
        - "1,2,3"        -> [1, 2, 3]
        - 1              -> [1]
        - [1, 2, 3]      -> [1, 2, 3]
        """
        if isinstance(v, list):
            return v
        if isinstance(v, int):
            return [v]
        if isinstance(v, str):
            parts = [p.strip() for p in v.split(",") if p.strip()]
            return [int(p) for p in parts]
        return v


# Single global settings object
settings = Settings()
