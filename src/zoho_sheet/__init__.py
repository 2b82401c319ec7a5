"""Async client SDK for the Zoho Sheet v2 API."""

from zoho_sheet.auth import DeviceAuthorization, ZohoOAuth
from zoho_sheet.config import ZohoConfig, load_config
from zoho_sheet.exceptions import (
    AuthConfigurationError,
    AuthExchangeError,
    InvalidArgumentError,
    MalformedResponseError,
    RecordConversionError,
    RemoteApiError,
    ZohoSheetError,
)
from zoho_sheet.sheets import (
    DeleteResult,
    HeaderRename,
    RecordCriteria,
    SheetClient,
    SheetRecord,
    Table,
    Workbook,
    Worksheet,
)

__version__ = "0.1.0"

__all__ = [
    "ZohoConfig",
    "load_config",
    "ZohoOAuth",
    "DeviceAuthorization",
    "SheetClient",
    "Workbook",
    "Worksheet",
    "Table",
    "RecordCriteria",
    "HeaderRename",
    "SheetRecord",
    "DeleteResult",
    "ZohoSheetError",
    "AuthConfigurationError",
    "AuthExchangeError",
    "InvalidArgumentError",
    "RemoteApiError",
    "MalformedResponseError",
    "RecordConversionError",
]
