"""API client for the API Gateway control plane."""

import logging
import random
import threading
import time
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError
from botocore.exceptions import ConnectionError as BotoConnectionError
from botocore.exceptions import (
    HTTPClientError,
    NoCredentialsError,
    ParamValidationError,
    PartialCredentialsError,
)

from .auth import create_session
from .exceptions import (
    GatewayAPIError,
    GatewayAuthenticationError,
    GatewayNetworkError,
    GatewayNotFoundError,
    GatewayRateLimitError,
)
from .utils import (
    API_VERSION,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY,
    RESOURCES_PAGE_SIZE,
    drop_none,
)

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = frozenset({"NotFoundException"})
RATE_LIMIT_CODES = frozenset(
    {"TooManyRequestsException", "ThrottlingException", "LimitExceededException"}
)
AUTH_CODES = frozenset(
    {
        "UnauthorizedException",
        "AccessDeniedException",
        "UnrecognizedClientException",
        "InvalidSignatureException",
        "ExpiredTokenException",
    }
)


class GatewayClient:
    """Client for the API Gateway REST API control plane.

    Wraps a boto3 ``apigateway`` client: keyword arguments use Python names,
    undeclared optional values are dropped, and botocore errors are turned
    into the typed exceptions of :mod:`pyapigw.exceptions`.

    Only throttled requests are retried. A throttled request was rejected
    before it was applied, so sending it again cannot create anything twice.
    Server errors and connection failures may have left the change applied
    and are raised on the first occurrence.
    """

    def __init__(
        self,
        session: Any = None,
        region: Optional[str] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        client: Any = None,
    ):
        """Initialize the API Gateway client.

        Args:
            session: boto3 session providing credentials (created from the
                environment if not provided)
            region: Optional region overriding the session's region
            max_retries: Maximum number of retry attempts for throttled
                requests (default: 3)
            retry_delay: Initial delay between retries in seconds (default: 1.0)
            client: Pre-built boto3 apigateway client (mainly for tests)
        """
        self.session = session
        self.region = region
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._client = client
        self._lock = threading.Lock()

    def _get_client(self) -> Any:
        """Get or create the boto3 apigateway client."""
        with self._lock:
            if self._client is None:
                session = self.session or create_session()
                self._client = session.client(
                    "apigateway",
                    api_version=API_VERSION,
                    region_name=self.region,
                )
            return self._client

    def _calculate_retry_delay(self, attempt: int) -> float:
        """Calculate delay before next retry using exponential backoff.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            Delay in seconds
        """
        base_delay = self.retry_delay * (2**attempt)
        # Add jitter: +/- 25% of base delay
        jitter = base_delay * 0.25 * (2 * random.random() - 1)
        return base_delay + jitter

    def _handle_client_error(
        self, e: ClientError, attempt: int
    ) -> tuple[GatewayAPIError, bool]:
        """Classify a botocore ClientError and decide whether to retry.

        Args:
            e: The botocore error
            attempt: Current attempt number

        Returns:
            Tuple of (exception to raise, should_retry)
        """
        error = e.response.get("Error", {})
        code = error.get("Code", "")
        message = error.get("Message") or str(e)
        status_code = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)

        if code in NOT_FOUND_CODES:
            return GatewayNotFoundError(message, code), False
        if code in AUTH_CODES:
            return GatewayAuthenticationError(message, code), False
        if code in RATE_LIMIT_CODES or status_code == 429:
            return (
                GatewayRateLimitError(f"Rate limit exceeded: {message}", code),
                attempt < self.max_retries,
            )

        return GatewayAPIError(message, code), False

    def _handle_botocore_error(self, e: BotoCoreError) -> GatewayAPIError:
        """Map a botocore error raised before any response was received."""
        if isinstance(e, (BotoConnectionError, HTTPClientError)):
            return GatewayNetworkError(f"Network error: {e}")
        if isinstance(e, NoCredentialsError):
            return GatewayAuthenticationError(
                "No AWS credentials found - set a profile, access keys or "
                "a credentials file"
            )
        if isinstance(e, PartialCredentialsError):
            return GatewayAuthenticationError(f"Incomplete AWS credentials: {e}")
        if isinstance(e, ParamValidationError):
            return GatewayAPIError(f"Invalid request parameters: {e}")
        return GatewayAPIError(str(e))

    def _retry_after(self, e: ClientError, attempt: int) -> float:
        headers = e.response.get("ResponseMetadata", {}).get("HTTPHeaders", {})
        retry_after = str(headers.get("retry-after", ""))
        if retry_after.isdigit():
            return float(retry_after)
        return self._calculate_retry_delay(attempt)

    def _request(self, operation: str, **params: Any) -> Any:
        """Call a control-plane operation, retrying only throttled requests.

        Args:
            operation: boto3 operation name (e.g. "create_resource")
            **params: Request parameters in boto3 shape; None values are dropped

        Returns:
            Response dictionary

        Raises:
            GatewayAPIError: If the request fails
        """
        params = drop_none(params)
        last_exception: Optional[Exception] = None

        for attempt in range(self.max_retries + 1):
            try:
                call = getattr(self._get_client(), operation)
                return call(**params)
            except ClientError as e:
                error, should_retry = self._handle_client_error(e, attempt)
                last_exception = error
                if should_retry:
                    delay = self._retry_after(e, attempt)
                    logger.debug(
                        f"{operation} throttled ({error.code}), "
                        f"retrying in {delay:.2f}s"
                    )
                    time.sleep(delay)
                    continue
                raise error from e
            except BotoCoreError as e:
                raise self._handle_botocore_error(e) from e

        # If we get here, we've exhausted all retries
        if last_exception:
            raise last_exception
        raise GatewayAPIError("Request failed after all retry attempts")

    # =========================
    # Resources
    # =========================

    def get_resources(self, rest_api_id: str) -> list[dict[str, Any]]:
        """List every resource of a REST API, following pagination.

        Args:
            rest_api_id: REST API identifier

        Returns:
            List of resource dictionaries (id, path, parentId, pathPart)
        """
        items: list[dict[str, Any]] = []
        position = None
        while True:
            response = self._request(
                "get_resources",
                restApiId=rest_api_id,
                limit=RESOURCES_PAGE_SIZE,
                position=position,
            )
            items.extend(response.get("items", []))
            position = response.get("position")
            if not position:
                return items

    def create_resource(
        self, rest_api_id: str, parent_id: str, path_part: str
    ) -> dict[str, Any]:
        """Create a child resource.

        Args:
            rest_api_id: REST API identifier
            parent_id: Identifier of the parent resource
            path_part: Last path segment, without leading slash

        Returns:
            Created resource dictionary
        """
        return self._request(
            "create_resource",
            restApiId=rest_api_id,
            parentId=parent_id,
            pathPart=path_part,
        )

    def delete_resource(self, rest_api_id: str, resource_id: str) -> Any:
        """Delete a resource (and, server-side, all of its descendants).

        Raises:
            GatewayNotFoundError: If the resource no longer exists
        """
        return self._request(
            "delete_resource", restApiId=rest_api_id, resourceId=resource_id
        )

    # =========================
    # Methods and integrations
    # =========================

    def put_method(
        self,
        rest_api_id: str,
        resource_id: str,
        http_method: str,
        authorization_type: str = "NONE",
        api_key_required: bool = False,
    ) -> Any:
        """Create a method request on a resource."""
        return self._request(
            "put_method",
            restApiId=rest_api_id,
            resourceId=resource_id,
            httpMethod=http_method,
            authorizationType=authorization_type,
            apiKeyRequired=api_key_required,
        )

    def put_integration(
        self,
        rest_api_id: str,
        resource_id: str,
        http_method: str,
        type: str,
        integration_http_method: Optional[str] = None,
        uri: Optional[str] = None,
        request_templates: Optional[dict[str, str]] = None,
        request_parameters: Optional[dict[str, str]] = None,
        credentials: Optional[str] = None,
        cache_namespace: Optional[str] = None,
        cache_key_parameters: Optional[list[str]] = None,
    ) -> Any:
        """Create the integration request of a method."""
        return self._request(
            "put_integration",
            restApiId=rest_api_id,
            resourceId=resource_id,
            httpMethod=http_method,
            type=type,
            integrationHttpMethod=integration_http_method,
            uri=uri,
            requestTemplates=request_templates,
            requestParameters=request_parameters,
            credentials=credentials,
            cacheNamespace=cache_namespace,
            cacheKeyParameters=cache_key_parameters,
        )

    def put_method_response(
        self,
        rest_api_id: str,
        resource_id: str,
        http_method: str,
        status_code: str,
        response_models: Optional[dict[str, str]] = None,
        response_parameters: Optional[dict[str, bool]] = None,
    ) -> Any:
        """Create a method response for one status code."""
        return self._request(
            "put_method_response",
            restApiId=rest_api_id,
            resourceId=resource_id,
            httpMethod=http_method,
            statusCode=status_code,
            responseModels=response_models,
            responseParameters=response_parameters,
        )

    def put_integration_response(
        self,
        rest_api_id: str,
        resource_id: str,
        http_method: str,
        status_code: str,
        response_parameters: Optional[dict[str, Any]] = None,
        response_templates: Optional[dict[str, str]] = None,
        selection_pattern: Optional[str] = None,
    ) -> Any:
        """Create an integration response for one status code."""
        return self._request(
            "put_integration_response",
            restApiId=rest_api_id,
            resourceId=resource_id,
            httpMethod=http_method,
            statusCode=status_code,
            responseParameters=response_parameters,
            responseTemplates=response_templates,
            selectionPattern=selection_pattern,
        )

    # =========================
    # Deployments
    # =========================

    def create_deployment(
        self,
        rest_api_id: str,
        stage_name: str,
        cache_cluster_enabled: bool = False,
        cache_cluster_size: Optional[str] = None,
        description: str = "",
        stage_description: str = "",
        variables: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        """Create a deployment snapshot bound to a stage."""
        return self._request(
            "create_deployment",
            restApiId=rest_api_id,
            stageName=stage_name,
            cacheClusterEnabled=cache_cluster_enabled,
            cacheClusterSize=cache_cluster_size,
            description=description,
            stageDescription=stage_description,
            variables=variables,
        )
