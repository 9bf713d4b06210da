"""
Capabilities: optional behaviour units for connectors and requests.
"""

from .registry import Capability, CapabilityRegistry, default_registry
from .builtin import (
    AcceptsJson,
    AlwaysThrowOnErrors,
    HasBody,
    HasCustomUserAgent,
    HasFormBody,
    HasJsonBody,
    HasMultipartBody,
    HasStreamBody,
    HasStringBody,
    HasTimeout,
    HasXmlBody,
    JsonApi,
)

__all__ = [
    "Capability",
    "CapabilityRegistry",
    "default_registry",
    "AcceptsJson",
    "AlwaysThrowOnErrors",
    "HasBody",
    "HasCustomUserAgent",
    "HasFormBody",
    "HasJsonBody",
    "HasMultipartBody",
    "HasStreamBody",
    "HasStringBody",
    "HasTimeout",
    "HasXmlBody",
    "JsonApi",
]
