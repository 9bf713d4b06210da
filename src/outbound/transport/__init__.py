"""
Transports that put prepared messages on the wire.
"""

from .base import Transport
from .requests_transport import RequestsTransport

__all__ = ["Transport", "RequestsTransport"]
