"""
Asset services package.

- asset_ledger: interface of the external fungible-asset ledgers
- asset_gateway: conversion, precision and transfer rules on top of them
"""

from ingotpool.services.asset.asset_gateway import AssetGateway
from ingotpool.services.asset.asset_ledger import AssetLedger, AssetLedgerRegistry


__all__ = [
    "AssetGateway",
    "AssetLedger",
    "AssetLedgerRegistry",
]
