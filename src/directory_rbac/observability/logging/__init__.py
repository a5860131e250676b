"""Observability – structured logging helpers."""
from directory_rbac.observability.logging.factory import JsonLoggerFactory
from directory_rbac.observability.logging.filters import DEFAULT_SENSITIVE_FIELDS, SensitiveFieldsFilter
from directory_rbac.observability.logging.processors import RedactSensitiveFields, get_logger

__all__ = [
    "DEFAULT_SENSITIVE_FIELDS",
    "JsonLoggerFactory",
    "RedactSensitiveFields",
    "SensitiveFieldsFilter",
    "get_logger",
]
