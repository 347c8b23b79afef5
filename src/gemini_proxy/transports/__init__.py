from .base import BaseTransport
from .requests_transport import RequestsTransport

__all__ = ["BaseTransport", "RequestsTransport"]
