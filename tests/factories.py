"""Test data factories using polyfactory."""

from types import SimpleNamespace
from typing import Any, Optional

from polyfactory import Use
from polyfactory.factories.pydantic_factory import ModelFactory
from faker import Faker
from azure.mgmt.compute.models import InstanceViewStatus

from opsconsole.models.session import User
from opsconsole.models.vm import VMRecord, VMTarget

fake = Faker()

POWER_STATES = ["Running", "Stopped", "Deallocated", "Starting", "Deallocating"]


class VMTargetFactory(ModelFactory[VMTarget]):
    """Factory for start/stop targets."""

    __model__ = VMTarget

    name = Use(lambda: f"vm-{fake.slug()}")
    resource_group = Use(lambda: f"rg-{fake.word()}")


class UserFactory(ModelFactory[User]):
    __model__ = User

    name = Use(fake.name)
    email = Use(fake.email)


def build_vm_record(
    name: Optional[str] = None,
    resource_group: Optional[str] = None,
    location: Optional[str] = None,
    power_state: Optional[str] = None,
) -> VMRecord:
    """Build a VMRecord, filling unspecified fields with fake data."""
    return VMRecord(
        name=name or f"vm-{fake.slug()}",
        resource_group=resource_group or f"rg-{fake.word()}",
        location=location or fake.random_element(elements=["eastus", "westeurope", "centralus"]),
        power_state=power_state or fake.random_element(elements=POWER_STATES),
    )


def vm_payload(vm: VMRecord) -> dict:
    return vm.model_dump(by_alias=True)


def sdk_vm(name: Optional[str], resource_group: Optional[str], location: Optional[str] = "eastus") -> Any:
    """Stand-in for an azure.mgmt.compute VirtualMachine returned by list_all()."""
    resource_id = None
    if resource_group is not None:
        resource_id = (
            f"/subscriptions/{fake.uuid4()}/resourceGroups/{resource_group}"
            f"/providers/Microsoft.Compute/virtualMachines/{name}"
        )
    return SimpleNamespace(id=resource_id, name=name, location=location)


def instance_view(*statuses: InstanceViewStatus) -> Any:
    return SimpleNamespace(statuses=list(statuses))


def power_status(code: str, display_status: Optional[str] = None) -> InstanceViewStatus:
    return InstanceViewStatus(code=code, display_status=display_status)
