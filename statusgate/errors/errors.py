"""
Exceptions raised by the prober.

Per-node query failures are never exceptions: they are recorded in place
as that node's own ``RequestFailed`` state. Only failures that end a poll
cycle or an HTTP request outright are raised.
"""


class StatusgateError(Exception):
    pass


class ProtocolTransportError(StatusgateError):
    """
    Raised when a whole batched request to the management-protocol proxy
    fails: connection errors, a non-2xx response from the proxy itself,
    or a body that cannot be matched to the request descriptors.
    """

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Batch request to '{url}' failed: {message}")


class RegionArgumentError(StatusgateError):
    """
    Raised when a region argument is required but missing, or names a
    region this prober does not serve.
    """


class OrchestratorCallError(StatusgateError):
    """Raised when an orchestrator API call fails."""

    def __init__(self, operation: str, status: int | None, message: str):
        self.operation = operation
        self.status = status
        super().__init__(f"{operation} failed: {message}")


class TargetNotFoundError(StatusgateError):
    """Raised when a maintenance request names no existing pod or region."""

    def __init__(self, target: str, message: str):
        self.target = target
        super().__init__(message)
