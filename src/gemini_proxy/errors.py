class ProxyError(Exception):
    status_code = 500
    kind = "internal_error"

class ConfigError(ProxyError):
    status_code = 500
    kind = "config_error"

class ValidationError(ProxyError):
    status_code = 400
    kind = "invalid_request"

class UpstreamTimeout(ProxyError):
    status_code = 504
    kind = "timeout"

class TransportError(ProxyError):
    status_code = 502
    kind = "transport_error"
