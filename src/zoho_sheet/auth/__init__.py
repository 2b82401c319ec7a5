"""Zoho OAuth authentication utilities."""

from zoho_sheet.auth.oauth import DeviceAuthorization, ZohoOAuth

__all__ = [
    "ZohoOAuth",
    "DeviceAuthorization",
]
