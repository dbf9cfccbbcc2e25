"""
rg-cleanup — Azure Resource Manager facade

Everything the cleanup needs from Azure, keyed by opaque resource IDs:
list, show, update (public IP detach) and delete. All calls block;
long-running operations are waited on before returning.

Provider errors are raised as azure.core.exceptions.AzureError and
handled by the caller.
"""

import logging
import re
from importlib.metadata import PackageNotFoundError, version
from typing import Optional

from pydantic import BaseModel

from rgcleanup import auth
from rgcleanup.config import ARM_SCOPE, CLIENT_DISTRIBUTION
from rgcleanup.errors import AzureEnvironmentError

logger = logging.getLogger("rgcleanup.azure_client")


class ResourceDescriptor(BaseModel):
    """A resource as ARM reports it. Never created or mutated here."""

    id: str
    name: str
    type: str
    location: str = ""

    @classmethod
    def from_generic(cls, resource) -> "ResourceDescriptor":
        return cls(
            id=resource.id,
            name=resource.name or "",
            type=resource.type or "",
            location=resource.location or "",
        )


def resource_type_of(resource_id: str) -> tuple[str, str]:
    """Split a resource ID into (provider namespace, full type path).

    `/subscriptions/s/resourceGroups/rg/providers/Microsoft.Network/
    networkInterfaces/nic1/ipConfigurations/c1` gives
    ("Microsoft.Network", "networkInterfaces/ipConfigurations").
    """
    from azure.mgmt.core.tools import parse_resource_id

    parsed = parse_resource_id(resource_id)
    namespace = parsed.get("namespace")
    if not namespace or not parsed.get("type"):
        raise ValueError(f"Not a provider resource ID: {resource_id}")

    types = [parsed["type"]]
    for level in range(1, parsed.get("last_child_num", 0) + 1):
        child_type = parsed.get(f"child_type_{level}")
        if child_type:
            types.append(child_type)
    return namespace, "/".join(types)


_STABLE_API_VERSION = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _pick_api_version(api_versions: list[str]) -> Optional[str]:
    """Latest stable (bare date) API version, falling back to the latest
    pre-release one (-preview, -beta, -alpha, ...)."""
    ordered = sorted(api_versions or [], reverse=True)
    stable = [v for v in ordered if _STABLE_API_VERSION.match(v)]
    if stable:
        return stable[0]
    return ordered[0] if ordered else None


class AzureResourceClient:
    """Thin wrapper over ResourceManagementClient + NetworkManagementClient."""

    def __init__(self, credential, subscription_id: str,
                 resource_client=None, network_client=None):
        self.credential = credential
        self.subscription_id = subscription_id
        self._resource_client = resource_client
        self._network_client = network_client
        self._api_versions: dict[str, str] = {}

    @classmethod
    def from_environment(cls, subscription_id: str = "") -> "AzureResourceClient":
        credential, sub_id = auth.resolve(subscription_id)
        return cls(credential, sub_id)

    # ── SDK clients (created on first use) ───────────────────

    @property
    def resources(self):
        if self._resource_client is None:
            from azure.mgmt.resource import ResourceManagementClient
            self._resource_client = ResourceManagementClient(self.credential, self.subscription_id)
        return self._resource_client

    @property
    def network(self):
        if self._network_client is None:
            from azure.mgmt.network import NetworkManagementClient
            self._network_client = NetworkManagementClient(self.credential, self.subscription_id)
        return self._network_client

    # ── Environment checks ───────────────────────────────────

    def client_version(self) -> str:
        """Installed version of the ARM client library."""
        try:
            return version(CLIENT_DISTRIBUTION)
        except PackageNotFoundError as e:
            raise AzureEnvironmentError(
                f"Azure SDK ({CLIENT_DISTRIBUTION}) is not installed. "
                f"Install it before running the cleanup."
            ) from e

    def check_authenticated(self) -> None:
        from azure.core.exceptions import ClientAuthenticationError

        try:
            self.credential.get_token(ARM_SCOPE)
        except ClientAuthenticationError as e:
            raise AzureEnvironmentError(
                "Not logged into Azure. Run 'az login' or provide service principal "
                "credentials before running the cleanup."
            ) from e

    def group_exists(self, resource_group: str) -> bool:
        return bool(self.resources.resource_groups.check_existence(resource_group))

    # ── Read ─────────────────────────────────────────────────

    def list_resources(self, resource_group: str,
                       resource_type: Optional[str] = None) -> list[ResourceDescriptor]:
        """List resources in a group, optionally only those of one type."""
        kwargs = {}
        if resource_type:
            kwargs["filter"] = f"resourceType eq '{resource_type}'"
        return [
            ResourceDescriptor.from_generic(r)
            for r in self.resources.resources.list_by_resource_group(resource_group, **kwargs)
        ]

    def show_name(self, resource_id: str) -> str:
        resource = self.resources.resources.get_by_id(resource_id, self.api_version_for(resource_id))
        return resource.name

    def first_ip_configuration(self, resource_group: str, nic_name: str):
        for ip_config in self.network.network_interface_ip_configurations.list(resource_group, nic_name):
            return ip_config
        return None

    def api_version_for(self, resource_id: str) -> str:
        """API version to address a resource with, cached per resource type."""
        namespace, type_path = resource_type_of(resource_id)
        key = f"{namespace}/{type_path}".lower()
        if key in self._api_versions:
            return self._api_versions[key]

        provider = self.resources.providers.get(namespace)
        for resource_type in provider.resource_types or []:
            if (resource_type.resource_type or "").lower() == type_path.lower():
                picked = _pick_api_version(resource_type.api_versions)
                if picked:
                    logger.debug(f"Using api-version {picked} for {namespace}/{type_path}")
                    self._api_versions[key] = picked
                    return picked

        from azure.core.exceptions import ResourceNotFoundError
        raise ResourceNotFoundError(
            message=f"No API version registered for {namespace}/{type_path}"
        )

    # ── Mutate ───────────────────────────────────────────────

    def detach_public_ip(self, resource_group: str, nic_name: str, ip_config_name: str) -> bool:
        """Remove the public IP from one IP configuration of a NIC.

        Returns False when the configuration had no public IP bound.
        """
        from azure.core.exceptions import ResourceNotFoundError

        nic = self.network.network_interfaces.get(resource_group, nic_name)
        for ip_config in nic.ip_configurations or []:
            if ip_config.name != ip_config_name:
                continue
            if ip_config.public_ip_address is None:
                return False
            ip_config.public_ip_address = None
            self.network.network_interfaces.begin_create_or_update(
                resource_group, nic_name, nic
            ).result()
            return True

        raise ResourceNotFoundError(
            message=f"IP configuration '{ip_config_name}' not found on network interface '{nic_name}'"
        )

    def delete(self, resource_id: str) -> None:
        self.resources.resources.begin_delete_by_id(
            resource_id, self.api_version_for(resource_id)
        ).result()
