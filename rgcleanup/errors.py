"""
Precondition errors.

These are raised before any mutating call is made and abort the whole
run. Per-resource failures during deletion are not exceptions here:
they are recorded on the run's CleanupReport instead.
"""


class PreconditionError(Exception):
    """A check that must pass before cleanup can start did not."""


class AzureEnvironmentError(PreconditionError):
    """The Azure SDK is missing, too old, or not authenticated."""


class UsageError(PreconditionError):
    """The command was invoked without a usable resource group."""


class ResourceGroupNotFoundError(PreconditionError):
    """The resource group does not exist in the subscription."""

    def __init__(self, resource_group: str):
        self.resource_group = resource_group
        super().__init__(f"Resource group '{resource_group}' does not exist.")
