"""pyapigw - Deploy declarative resource trees to AWS API Gateway."""

from .api import GatewayClient
from .exceptions import (
    DeleteError,
    DeployConfigError,
    DeployError,
    DeploymentError,
    FetchError,
    GatewayAPIError,
    GatewayAuthenticationError,
    GatewayConfigError,
    GatewayError,
    GatewayNetworkError,
    GatewayNotFoundError,
    GatewayRateLimitError,
    IntegrationCreateError,
    IntegrationResponseCreateError,
    MethodCreateError,
    MethodResponseCreateError,
    ResourceCreateError,
    ResponseCreateError,
    RootNotFoundError,
)
from .models import (
    DeploymentSpec,
    DeployTarget,
    DesiredNode,
    IntegrationSpec,
    MethodSpec,
    RemoteResource,
    ResponseSpec,
)

__version__ = "0.1.0"

__all__ = [
    "GatewayClient",
    "GatewayError",
    "GatewayConfigError",
    "DeployConfigError",
    "GatewayAPIError",
    "GatewayNotFoundError",
    "GatewayRateLimitError",
    "GatewayAuthenticationError",
    "GatewayNetworkError",
    "DeployError",
    "FetchError",
    "RootNotFoundError",
    "DeleteError",
    "ResourceCreateError",
    "MethodCreateError",
    "IntegrationCreateError",
    "ResponseCreateError",
    "MethodResponseCreateError",
    "IntegrationResponseCreateError",
    "DeploymentError",
    "DesiredNode",
    "MethodSpec",
    "IntegrationSpec",
    "ResponseSpec",
    "DeploymentSpec",
    "DeployTarget",
    "RemoteResource",
]
