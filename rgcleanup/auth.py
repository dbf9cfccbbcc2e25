"""
rg-cleanup — Azure authentication

Resolves the credential and subscription the cleanup runs under.

Two ways in:
- CI: the workflow hands over a service-principal JSON blob in
  AZURE_CREDENTIALS (same shape `azure/login` accepts). We build a
  ClientSecretCredential from it and take the subscription from it.
- Everywhere else: DefaultAzureCredential, which picks up the
  AZURE_CLIENT_ID / AZURE_CLIENT_SECRET / AZURE_TENANT_ID env vars or an
  existing `az login` session.
"""

import logging
import os
import subprocess
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from rgcleanup.config import AZURE_CREDENTIALS, AZURE_SUBSCRIPTION_ID
from rgcleanup.errors import AzureEnvironmentError

logger = logging.getLogger("rgcleanup.auth")


class AzureCredentials(BaseModel):
    """Service-principal payload supplied by the CI workflow."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    client_id: str = Field(alias="clientId", min_length=1)
    client_secret: str = Field(alias="clientSecret", min_length=1)
    subscription_id: str = Field(alias="subscriptionId", min_length=1)
    tenant_id: str = Field(alias="tenantId", min_length=1)


def parse_credentials(raw: str) -> AzureCredentials:
    """Parse the AZURE_CREDENTIALS JSON blob."""
    try:
        return AzureCredentials.model_validate_json(raw)
    except ValidationError as e:
        raise AzureEnvironmentError(
            f"AZURE_CREDENTIALS is not a valid service principal payload: {e.error_count()} error(s)"
        ) from e


def get_credential(credentials: Optional[AzureCredentials] = None):
    """Build the azure-identity credential for this run."""
    if credentials is not None:
        from azure.identity import ClientSecretCredential
        return ClientSecretCredential(
            tenant_id=credentials.tenant_id,
            client_id=credentials.client_id,
            client_secret=credentials.client_secret,
        )

    from azure.identity import DefaultAzureCredential
    return DefaultAzureCredential(
        exclude_workload_identity_credential=True,
        exclude_managed_identity_credential=True,
    )


def get_subscription_id(
    explicit: str = "",
    credentials: Optional[AzureCredentials] = None,
) -> str:
    """Resolve the Azure subscription ID from args, payload, env or CLI."""
    if explicit:
        return explicit
    if credentials is not None:
        return credentials.subscription_id

    sub_id = os.getenv("AZURE_SUBSCRIPTION_ID", AZURE_SUBSCRIPTION_ID)
    if sub_id:
        return sub_id

    try:
        result = subprocess.run(
            ["az", "account", "show", "--query", "id", "-o", "tsv"],
            capture_output=True, text=True, timeout=10,
        )
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip()
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"az account show unavailable: {e}")

    raise AzureEnvironmentError(
        "Not logged into Azure. Set AZURE_SUBSCRIPTION_ID or AZURE_CREDENTIALS, "
        "or run 'az login' before running the cleanup."
    )


def resolve(subscription_id: str = "", raw_credentials: Optional[str] = None):
    """Return (credential, subscription_id) for the current environment."""
    raw = os.getenv("AZURE_CREDENTIALS", AZURE_CREDENTIALS) if raw_credentials is None else raw_credentials
    credentials = parse_credentials(raw) if raw else None
    return get_credential(credentials), get_subscription_id(subscription_id, credentials)
