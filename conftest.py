"""
Shared fixtures: an in-memory stand-in for the Azure facade.

FakeAzure keeps a resource store for one group and records every call
in order, so tests can assert on ordering and on which calls were (not)
made. It mimics the two ARM dependency errors the cleanup order exists
for: a public IP bound to a NIC cannot be deleted, and a resource
cannot be deleted while the resource blocking it still exists.
"""

import logging
from types import SimpleNamespace

import pytest
from azure.core.exceptions import HttpResponseError, ResourceNotFoundError

from rgcleanup.azure_client import ResourceDescriptor
from rgcleanup.errors import AzureEnvironmentError

SUBSCRIPTION = "00000000-0000-0000-0000-000000000000"
GROUP = "rg-cleanup-test"

VM = "Microsoft.Compute/virtualMachines"
DISK = "Microsoft.Compute/disks"
NIC = "Microsoft.Network/networkInterfaces"
PIP = "Microsoft.Network/publicIPAddresses"
VNET = "Microsoft.Network/virtualNetworks"
STORAGE = "Microsoft.Storage/storageAccounts"


def rid(resource_type: str, name: str, group: str = GROUP) -> str:
    return f"/subscriptions/{SUBSCRIPTION}/resourceGroups/{group}/providers/{resource_type}/{name}"


MUTATING = {"detach_public_ip", "delete"}


class FakeAzure:
    def __init__(self, group: str = GROUP, exists: bool = True,
                 version: str = "23.1.0", authenticated: bool = True):
        self.group = group
        self.exists = exists
        self.version = version
        self.authenticated = authenticated
        self.store: dict[str, ResourceDescriptor] = {}
        self.ip_configs: dict[str, list[SimpleNamespace]] = {}
        self.blocked_by: dict[str, str] = {}
        self.fail_delete: set[str] = set()
        self.fail_detach: set[str] = set()
        self.calls: list[tuple] = []

    # ── setup helpers ────────────────────────────────────────

    def add(self, resource_type: str, name: str, location: str = "eastus2") -> str:
        resource_id = rid(resource_type, name, self.group)
        self.store[resource_id] = ResourceDescriptor(
            id=resource_id, name=name, type=resource_type, location=location,
        )
        return resource_id

    def add_nic(self, name: str, public_ip_id: str = None, configs: int = 1) -> str:
        nic_id = self.add(NIC, name)
        self.ip_configs[name] = [
            SimpleNamespace(name=f"ipconfig{i + 1}", public_ip_address=public_ip_id if i == 0 else None)
            for i in range(configs)
        ]
        return nic_id

    def block(self, resource_id: str, blocker_id: str) -> None:
        self.blocked_by[resource_id] = blocker_id

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]

    def mutating_calls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in MUTATING]

    def deleted_ids(self) -> list[str]:
        return [c[1] for c in self.calls if c[0] == "delete"]

    # ── facade ───────────────────────────────────────────────

    def client_version(self) -> str:
        self.calls.append(("client_version",))
        return self.version

    def check_authenticated(self) -> None:
        self.calls.append(("check_authenticated",))
        if not self.authenticated:
            raise AzureEnvironmentError("Not logged into Azure.")

    def group_exists(self, resource_group: str) -> bool:
        self.calls.append(("group_exists", resource_group))
        return self.exists and resource_group == self.group

    def list_resources(self, resource_group: str, resource_type: str = None):
        self.calls.append(("list_resources", resource_group, resource_type))
        return [
            r for r in self.store.values()
            if resource_type is None or r.type.lower() == resource_type.lower()
        ]

    def show_name(self, resource_id: str) -> str:
        self.calls.append(("show_name", resource_id))
        if resource_id not in self.store:
            raise ResourceNotFoundError(message=f"{resource_id} not found")
        return self.store[resource_id].name

    def first_ip_configuration(self, resource_group: str, nic_name: str):
        self.calls.append(("first_ip_configuration", resource_group, nic_name))
        configs = self.ip_configs.get(nic_name, [])
        return configs[0] if configs else None

    def detach_public_ip(self, resource_group: str, nic_name: str, ip_config_name: str) -> bool:
        self.calls.append(("detach_public_ip", resource_group, nic_name, ip_config_name))
        if nic_name in self.fail_detach:
            raise HttpResponseError(message=f"Failed to update network interface {nic_name}")
        for config in self.ip_configs.get(nic_name, []):
            if config.name == ip_config_name:
                if config.public_ip_address is None:
                    return False
                config.public_ip_address = None
                return True
        raise ResourceNotFoundError(message=f"{ip_config_name} not found")

    def delete(self, resource_id: str) -> None:
        self.calls.append(("delete", resource_id))
        if resource_id in self.fail_delete:
            raise HttpResponseError(message=f"Cannot delete {resource_id}")
        if resource_id not in self.store:
            raise ResourceNotFoundError(message=f"{resource_id} not found")
        for configs in self.ip_configs.values():
            if any(c.public_ip_address == resource_id for c in configs):
                raise HttpResponseError(message="PublicIPAddressInUse")
        blocker = self.blocked_by.get(resource_id)
        if blocker and blocker in self.store:
            raise HttpResponseError(message=f"{resource_id} is in use by {blocker}")
        resource = self.store.pop(resource_id)
        if resource.type == NIC:
            self.ip_configs.pop(resource.name, None)


@pytest.fixture
def fake_azure():
    return FakeAzure()


@pytest.fixture(autouse=True)
def reset_rgcleanup_logger():
    """Undo setup_logging so caplog keeps seeing records in later tests."""
    yield
    logger = logging.getLogger("rgcleanup")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
