"""
Pydantic models ("schemas") that only exist for output.

InterfaceCheckOutput is the compact identity view of an interface that the
interface-metrics check prints as its status message when asked to.
"""

from pydantic import BaseModel, ConfigDict, Field

from netcheck.models import Interface


class InterfaceCheckOutput(BaseModel):
    """
    Identity of one interface. Absent fields are rendered as "".
    """

    model_config = ConfigDict(populate_by_name=True)

    if_index: str = Field("", alias="ifIndex")
    if_descr: str = Field("", alias="ifDescr")
    if_name: str = Field("", alias="ifName")
    if_alias: str = Field("", alias="ifAlias")
    if_phys_address: str = Field("", alias="ifPhysAddress")

    @classmethod
    def from_interface(cls, interface: Interface) -> "InterfaceCheckOutput":
        return cls(
            if_index=str(interface.if_index) if interface.if_index is not None else "",
            if_descr=interface.if_descr or "",
            if_name=interface.if_name or "",
            if_alias=interface.if_alias or "",
            if_phys_address=interface.if_phys_address or "",
        )
