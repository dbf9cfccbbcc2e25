"""
rg-cleanup — Resource group cleanup procedure

Deletes everything inside one resource group, in an order that avoids
the dependency errors ARM raises for the common resource types:

    validate → enumerate → (done if empty) → detach public IPs
             → delete by type in DELETION_ORDER → delete remainder
             → report → final listing

Strictly sequential. Nothing is retried: a call ARM rejects is logged,
recorded on the run's CleanupReport, and the run moves on to the next
item. Re-running the whole procedure is the recovery path; resources
that are already gone are simply not listed again.

Usage:
    from rgcleanup.cleanup import run
    exit_code = run("my-test-rg")
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from azure.core.exceptions import AzureError

from rgcleanup.azure_client import AzureResourceClient
from rgcleanup.config import APP_NAME, DELETION_ORDER, MIN_CLIENT_VERSION, NIC_RESOURCE_TYPE
from rgcleanup.errors import (
    AzureEnvironmentError,
    PreconditionError,
    ResourceGroupNotFoundError,
    UsageError,
)
from rgcleanup.utils import log_lines, render_resource_table, version_at_least

logger = logging.getLogger("rgcleanup.cleanup")


@dataclass
class CleanupReport:
    """Failures accumulated over a single run."""

    failed_disassociations: list[str] = field(default_factory=list)
    failed_deletions: list[str] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed_disassociations or self.failed_deletions)

    @property
    def exit_code(self) -> int:
        return 1 if self.has_failures else 0

    def record_disassociation_failure(self, nic_id: str) -> None:
        if nic_id not in self.failed_disassociations:
            self.failed_disassociations.append(nic_id)

    def record_deletion_failure(self, resource_id: str) -> None:
        if resource_id not in self.failed_deletions:
            self.failed_deletions.append(resource_id)


# ══════════════════════════════════════════════════════════════
# PRECONDITIONS
# ══════════════════════════════════════════════════════════════

def validate(
    resource_group: Optional[str],
    client: Optional[AzureResourceClient] = None,
    min_version: str = MIN_CLIENT_VERSION,
) -> AzureResourceClient:
    """Run every check that must pass before anything is mutated.

    Raises a PreconditionError subclass on the first check that fails.
    """
    if client is None:
        client = AzureResourceClient.from_environment()

    current_version = client.client_version()
    client.check_authenticated()

    if not resource_group or not resource_group.strip():
        raise UsageError(f"Usage: {APP_NAME} <AZURE_RG>")

    if not version_at_least(current_version, min_version):
        raise AzureEnvironmentError(
            f"Azure SDK version {min_version} or higher is required. "
            f"Current version: {current_version}"
        )

    try:
        exists = client.group_exists(resource_group)
    except AzureError as e:
        raise AzureEnvironmentError(
            f"Could not check resource group '{resource_group}': {e}"
        ) from e
    if not exists:
        raise ResourceGroupNotFoundError(resource_group)

    return client


# ══════════════════════════════════════════════════════════════
# STEPS
# ══════════════════════════════════════════════════════════════

def list_resources(client: AzureResourceClient, resource_group: str) -> bool:
    """Log what is in the group. Returns False when the group is empty."""
    resources = client.list_resources(resource_group)
    if not resources:
        logger.info(f"No resources in resource group '{resource_group}'. Cleanup is not needed.")
        return False

    logger.info("Listing resources with additional details:")
    log_lines(logger, render_resource_table(resources))
    return True


def disassociate_public_ips(client: AzureResourceClient, resource_group: str,
                            report: CleanupReport) -> None:
    """Detach public IPs from every NIC so both can be deleted afterwards."""
    logger.info("Disassociating public IPs from network interfaces...")

    try:
        nics = client.list_resources(resource_group, NIC_RESOURCE_TYPE)
    except AzureError as e:
        logger.error(f"Error listing network interfaces: {e}")
        return

    if not nics:
        logger.info("No network interfaces to disassociate.")
        return

    for nic in nics:
        try:
            nic_name = client.show_name(nic.id)
            ip_config = client.first_ip_configuration(resource_group, nic_name)
            if ip_config is None:
                logger.error(f"Network interface {nic.id} has no IP configuration")
                report.record_disassociation_failure(nic.id)
                continue
            if client.detach_public_ip(resource_group, nic_name, ip_config.name):
                logger.info(f"Public IP disassociated from network interface {nic.id}")
            else:
                logger.info(f"No public IP bound to network interface {nic.id}")
        except AzureError as e:
            logger.error(f"Error disassociating Public IP from network interface {nic.id}: {e}")
            report.record_disassociation_failure(nic.id)


def delete_resources(client: AzureResourceClient, resource_group: str,
                     report: CleanupReport, resource_type: Optional[str] = None) -> None:
    """Delete every resource of one type, or everything left when type is None."""
    if resource_type:
        logger.info(f"Deleting resources of type {resource_type}...")
    else:
        logger.info("Deleting all remaining resources...")

    try:
        resources = client.list_resources(resource_group, resource_type)
    except AzureError as e:
        # later types and the remainder sweep list again
        logger.error(f"Error listing {resource_type or 'remaining'} resources: {e}")
        return

    if not resources:
        if resource_type:
            logger.info(f"No resources of type {resource_type} found.")
        else:
            logger.info("No remaining resources found.")
        return

    for resource in resources:
        try:
            client.delete(resource.id)
        except AzureError as e:
            logger.error(f"Error deleting {resource.id}: {e}")
            report.record_deletion_failure(resource.id)
        else:
            logger.info(f"{resource.id} - deleted")


def report_failures(report: CleanupReport) -> int:
    """Log every failure grouped by category and return the exit status."""
    if not report.has_failures:
        return 0

    logger.error("Some operations failed.")
    if report.failed_disassociations:
        logger.error("Failed to disassociate the following network interfaces:")
        log_lines(logger, report.failed_disassociations, logging.ERROR)
    if report.failed_deletions:
        logger.error("Failed to delete the following resources:")
        log_lines(logger, report.failed_deletions, logging.ERROR)
    return report.exit_code


# ══════════════════════════════════════════════════════════════
# ENTRY POINT
# ══════════════════════════════════════════════════════════════

def run(
    resource_group: Optional[str],
    client: Optional[AzureResourceClient] = None,
    min_version: str = MIN_CLIENT_VERSION,
    deletion_order: Optional[list[str]] = None,
) -> int:
    """Clean up one resource group. Returns the process exit status."""
    try:
        client = validate(resource_group, client, min_version)
    except PreconditionError as e:
        logger.error(str(e))
        return 1

    logger.info(f"Starting the cleanup of the resource group '{resource_group}'...")

    try:
        has_resources = list_resources(client, resource_group)
    except AzureError as e:
        logger.error(f"Error listing resources in resource group '{resource_group}': {e}")
        return 1
    if not has_resources:
        return 0

    report = CleanupReport()

    disassociate_public_ips(client, resource_group, report)

    for resource_type in (DELETION_ORDER if deletion_order is None else deletion_order):
        delete_resources(client, resource_group, report, resource_type)
    delete_resources(client, resource_group, report)

    exit_code = report_failures(report)

    logger.info("List of resources after cleanup:")
    try:
        list_resources(client, resource_group)
    except AzureError as e:
        # informational only, exit status stays as reported
        logger.error(f"Error listing resources after cleanup: {e}")
    logger.info(f"Cleanup of resource group '{resource_group}' completed.")

    return exit_code
