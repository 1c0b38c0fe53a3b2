# bol_export/errors.py
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
    UNKNOWN_MONTH = "UNKNOWN_MONTH"
    INVALID_PRICE = "INVALID_PRICE"
    NETWORK = "NETWORK"
    MALFORMED_PAGE = "MALFORMED_PAGE"
    CONFIG = "CONFIG"
    UNKNOWN = "UNKNOWN"


class ExportError(Exception):
    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str, code: ErrorCode | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class MissingCredentialError(ExportError):
    """No hay token CSRF: se aborta antes de hacer cualquier request."""

    code = ErrorCode.MISSING_CREDENTIAL


class UnknownMonthError(ExportError):
    code = ErrorCode.UNKNOWN_MONTH

    def __init__(self, token: str, text: str | None = None):
        msg = f"Mes desconocido: '{token}'"
        if text is not None and text != token:
            msg += f" (fecha '{text}')"
        super().__init__(msg)
        self.token = token


class InvalidPriceFormatError(ExportError):
    code = ErrorCode.INVALID_PRICE

    def __init__(self, text: str):
        super().__init__(f"Precio con formato inválido: '{text}'")
        self.text = text


class NetworkError(ExportError):
    code = ErrorCode.NETWORK

    def __init__(self, message: str, url: str | None = None, status: int | None = None):
        super().__init__(message)
        self.url = url
        self.status = status


class MalformedPageError(ExportError):
    """La respuesta JSON no tiene la forma {orders: [...], moreOrdersUrl?}."""

    code = ErrorCode.MALFORMED_PAGE


class ConfigError(ExportError):
    code = ErrorCode.CONFIG
