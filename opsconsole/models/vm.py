from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional
from enum import Enum

UNKNOWN = "Unknown"

class VMAction(str, Enum):
    START = "start"
    STOP = "stop"

class TemplateType(str, Enum):
    DEV = "dev"
    QA = "qa"
    PRODUCTION = "production"

class VMKey(BaseModel):
    """Identity of a VM within one inventory fetch"""
    model_config = ConfigDict(frozen=True)

    resource_group: str
    name: str

class VMRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    resource_group: str = Field(alias="resourceGroup")
    location: str
    power_state: str = Field(alias="powerState")

    @property
    def key(self) -> VMKey:
        return VMKey(resource_group=self.resource_group, name=self.name)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "VMRecord":
        """Build a record from an API payload, defaulting absent fields to Unknown"""
        def field(key: str) -> str:
            value = payload.get(key)
            return value if isinstance(value, str) and value else UNKNOWN

        return cls(
            name=field("name"),
            resource_group=field("resourceGroup"),
            location=field("location"),
            power_state=field("powerState"),
        )

# Request / response bodies

class VMTarget(BaseModel):
    name: str
    resource_group: str

class VMActionResponse(BaseModel):
    success: bool
    message: str

class DevTemplateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    vm_name: str = Field(alias="vmName")

class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
