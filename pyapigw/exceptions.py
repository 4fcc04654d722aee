"""Exceptions raised by pyapigw."""

from typing import Optional


class GatewayError(Exception):
    """Base exception for all pyapigw errors."""


class GatewayConfigError(GatewayError):
    """Raised when credentials or client settings are missing or invalid."""


class DeployConfigError(GatewayConfigError):
    """Raised when a deployment declaration cannot be loaded or validated."""


# =============================================================================
# Control-plane client errors
# =============================================================================


class GatewayAPIError(GatewayError):
    """Raised when a call to the API Gateway control plane fails."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class GatewayNotFoundError(GatewayAPIError):
    """Raised when the requested entity does not exist (NotFoundException)."""


class GatewayRateLimitError(GatewayAPIError):
    """Raised when the control plane throttles the request."""


class GatewayAuthenticationError(GatewayAPIError):
    """Raised when the credentials are rejected."""


class GatewayNetworkError(GatewayAPIError):
    """Raised when the control plane cannot be reached."""


# =============================================================================
# Deployment engine errors
# =============================================================================


class DeployError(GatewayError):
    """Base class for failures of a deployment run.

    Every subclass keeps the underlying client error in ``cause`` so callers
    can tell a throttled request from a rejected one without parsing text.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class FetchError(DeployError):
    """Raised when the current remote resources cannot be listed."""

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__(f"Unable to fetch API resources: {cause}", cause)


class RootNotFoundError(DeployError):
    """Raised when the remote listing has no resource with path ``/``."""

    def __init__(self) -> None:
        super().__init__("Unable to find root resource")


class DeleteError(DeployError):
    """Raised when a resource delete fails for a reason other than not-found."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        super().__init__(f"Unable to delete a resource {path}: {cause}", cause)
        self.path = path


class ResourceCreateError(DeployError):
    """Raised when a resource node cannot be created."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        super().__init__(f"Unable to create resource {path}: {cause}", cause)
        self.path = path


class MethodCreateError(DeployError):
    """Raised when a method request cannot be created."""

    def __init__(self, path: str, verb: str, cause: Optional[BaseException] = None):
        super().__init__(
            f"Unable to create method request {verb} for resource {path}: {cause}",
            cause,
        )
        self.path = path
        self.verb = verb


class IntegrationCreateError(DeployError):
    """Raised when the integration request of a method cannot be created."""

    def __init__(self, path: str, verb: str, cause: Optional[BaseException] = None):
        super().__init__(
            f"Unable to create integration request for {verb} {path}: {cause}",
            cause,
        )
        self.path = path
        self.verb = verb


class ResponseCreateError(DeployError):
    """Base class for method and integration response failures."""

    kind = "response"

    def __init__(
        self,
        path: str,
        verb: str,
        status: str,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(
            f"Unable to create {self.kind} {status} for resource "
            f"{verb} {path}: {cause}",
            cause,
        )
        self.path = path
        self.verb = verb
        self.status = status


class MethodResponseCreateError(ResponseCreateError):
    """Raised when a method response cannot be created."""

    kind = "method response"


class IntegrationResponseCreateError(ResponseCreateError):
    """Raised when an integration response cannot be created."""

    kind = "integration response"


class DeploymentError(DeployError):
    """Raised when the deployment to a stage fails."""

    def __init__(self, stage_name: str, cause: Optional[BaseException] = None):
        super().__init__(f"Unable to deploy to stage {stage_name}: {cause}", cause)
        self.stage_name = stage_name
