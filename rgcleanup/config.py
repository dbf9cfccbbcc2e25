"""
rg-cleanup configuration and constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# ── App Settings ──────────────────────────────────────────────
APP_NAME = "rg-cleanup"

# ── Logging ──────────────────────────────────────────────────
# Every line goes to stdout and is appended to this file in the
# working directory.
LOG_FILE = os.getenv("RG_CLEANUP_LOG_FILE", "cleanup.log")
LOG_LEVEL = os.getenv("RG_CLEANUP_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s [%(levelname)s] - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# ── Azure SDK ────────────────────────────────────────────────
# Oldest azure-mgmt-resource release we drive (compared as a version,
# not as a string).
CLIENT_DISTRIBUTION = "azure-mgmt-resource"
MIN_CLIENT_VERSION = os.getenv("RG_CLEANUP_MIN_CLIENT_VERSION", "23.0.0")

ARM_SCOPE = "https://management.azure.com/.default"

# ── Azure Identity ───────────────────────────────────────────
# AZURE_CREDENTIALS is the JSON blob handed over by the CI workflow
# (clientId / clientSecret / subscriptionId / tenantId). When it is
# not set, DefaultAzureCredential picks up env vars or `az login`.
AZURE_SUBSCRIPTION_ID = os.getenv("AZURE_SUBSCRIPTION_ID", "")
AZURE_CREDENTIALS = os.getenv("AZURE_CREDENTIALS", "")

# ── Deletion Order ───────────────────────────────────────────
# Hand-curated approximation of ARM's dependency graph for the
# resource types we usually find in a test group. Anything not listed
# here is picked up by the remainder sweep.
NIC_RESOURCE_TYPE = "Microsoft.Network/networkInterfaces"

DELETION_ORDER = [
    "Microsoft.Compute/virtualMachines",
    "Microsoft.Network/publicIPAddresses",
    NIC_RESOURCE_TYPE,
    "Microsoft.Compute/disks",
    "Microsoft.Network/networkSecurityGroups",
    "Microsoft.Network/loadBalancers",
    "Microsoft.Network/virtualNetworks",
    "Microsoft.Storage/storageAccounts",
    "Microsoft.KeyVault/vaults",
    "Microsoft.Web/sites",
    "Microsoft.Web/serverFarms",
    "Microsoft.ServiceBus/namespaces",
    "Microsoft.AppConfiguration/configurationStores",
    "Microsoft.ManagedIdentity/userAssignedIdentities",
]
