"""
rg-cleanup — ordered deletion of everything inside an Azure resource group.
"""

__version__ = "0.1.0"
