"""Unit tests for the API Gateway client."""

from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import (
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoRegionError,
    PartialCredentialsError,
)

from pyapigw.api import GatewayClient
from pyapigw.exceptions import (
    GatewayAPIError,
    GatewayAuthenticationError,
    GatewayNetworkError,
    GatewayNotFoundError,
    GatewayRateLimitError,
)


def client_error(code, status=400, message="boom", headers=None):
    """Build a botocore ClientError."""
    return ClientError(
        {
            "Error": {"Code": code, "Message": message},
            "ResponseMetadata": {
                "HTTPStatusCode": status,
                "HTTPHeaders": headers or {},
            },
        },
        "Operation",
    )


@pytest.fixture
def boto_client():
    """Create a mock boto3 apigateway client."""
    return Mock()


@pytest.fixture
def client(boto_client):
    """Create a GatewayClient around the mock boto3 client."""
    return GatewayClient(client=boto_client, max_retries=2, retry_delay=0.01)


class TestGatewayClientInit:
    """Tests for client construction."""

    def test_boto_client_created_lazily_from_session(self):
        """The boto3 client is built from the session on first use."""
        session = Mock()
        session.client.return_value.get_resources.return_value = {"items": []}
        client = GatewayClient(session=session, region="eu-west-1")

        session.client.assert_not_called()
        client.get_resources("api")

        session.client.assert_called_once_with(
            "apigateway", api_version="2015-07-09", region_name="eu-west-1"
        )

    def test_defaults(self):
        """Retry settings have sensible defaults."""
        client = GatewayClient(client=Mock())
        assert client.max_retries == 3
        assert client.retry_delay == 1.0


class TestRequestShapes:
    """Tests for translating keyword arguments to boto3 requests."""

    def test_create_resource(self, client, boto_client):
        """create_resource sends camelCase keys."""
        boto_client.create_resource.return_value = {"id": "new"}

        result = client.create_resource("api", "root", "items")

        assert result == {"id": "new"}
        boto_client.create_resource.assert_called_once_with(
            restApiId="api", parentId="root", pathPart="items"
        )

    def test_delete_resource(self, client, boto_client):
        """delete_resource sends the resource id."""
        client.delete_resource("api", "res-1")

        boto_client.delete_resource.assert_called_once_with(
            restApiId="api", resourceId="res-1"
        )

    def test_put_integration_drops_none_values(self, client, boto_client):
        """Undeclared optional fields are not sent at all."""
        client.put_integration(
            "api",
            "res-1",
            "GET",
            "MOCK",
            integration_http_method="POST",
            request_templates={},
            cache_key_parameters=[],
        )

        boto_client.put_integration.assert_called_once_with(
            restApiId="api",
            resourceId="res-1",
            httpMethod="GET",
            type="MOCK",
            integrationHttpMethod="POST",
            requestTemplates={},
            cacheKeyParameters=[],
        )

    def test_put_integration_response_keeps_declared_fields(self, client, boto_client):
        """Declared parameters and selection pattern are passed through."""
        client.put_integration_response(
            "api",
            "res-1",
            "GET",
            "500",
            response_parameters={"method.response.header.X": "'1'"},
            selection_pattern="Error.*",
        )

        boto_client.put_integration_response.assert_called_once_with(
            restApiId="api",
            resourceId="res-1",
            httpMethod="GET",
            statusCode="500",
            responseParameters={"method.response.header.X": "'1'"},
            selectionPattern="Error.*",
        )

    def test_create_deployment(self, client, boto_client):
        """create_deployment sends stage and cache options."""
        client.create_deployment("api", "prod", variables={"a": "b"})

        boto_client.create_deployment.assert_called_once_with(
            restApiId="api",
            stageName="prod",
            cacheClusterEnabled=False,
            description="",
            stageDescription="",
            variables={"a": "b"},
        )

    def test_get_resources_follows_pagination(self, client, boto_client):
        """All pages are read until no position is returned."""
        boto_client.get_resources.side_effect = [
            {"items": [{"id": "1", "path": "/"}], "position": "next"},
            {"items": [{"id": "2", "path": "/a"}]},
        ]

        items = client.get_resources("api")

        assert [item["id"] for item in items] == ["1", "2"]
        assert boto_client.get_resources.call_count == 2
        second_call = boto_client.get_resources.call_args_list[1]
        assert second_call.kwargs["position"] == "next"
        assert "position" not in boto_client.get_resources.call_args_list[0].kwargs


class TestErrorClassification:
    """Tests for mapping botocore errors to pyapigw exceptions."""

    def test_not_found_is_typed_and_not_retried(self, client, boto_client):
        """NotFoundException becomes GatewayNotFoundError immediately."""
        boto_client.delete_resource.side_effect = client_error(
            "NotFoundException", 404, "Invalid Resource identifier specified"
        )

        with pytest.raises(GatewayNotFoundError, match="Invalid Resource identifier"):
            client.delete_resource("api", "gone")

        assert boto_client.delete_resource.call_count == 1

    def test_unauthorized(self, client, boto_client):
        """Credential failures are not retried."""
        boto_client.get_resources.side_effect = client_error(
            "UnauthorizedException", 401
        )

        with pytest.raises(GatewayAuthenticationError):
            client.get_resources("api")

        assert boto_client.get_resources.call_count == 1

    def test_bad_request_keeps_code(self, client, boto_client):
        """Other client errors carry the error code."""
        boto_client.put_method.side_effect = client_error("BadRequestException")

        with pytest.raises(GatewayAPIError) as exc_info:
            client.put_method("api", "res", "GET")

        assert exc_info.value.code == "BadRequestException"
        assert not isinstance(exc_info.value, GatewayNotFoundError)
        assert boto_client.put_method.call_count == 1

    @patch("pyapigw.api.time.sleep")
    def test_throttling_retried_then_succeeds(self, mock_sleep, client, boto_client):
        """Throttled calls are retried with backoff."""
        boto_client.create_resource.side_effect = [
            client_error("TooManyRequestsException", 429),
            {"id": "new"},
        ]

        result = client.create_resource("api", "root", "items")

        assert result == {"id": "new"}
        assert boto_client.create_resource.call_count == 2
        mock_sleep.assert_called_once()

    @patch("pyapigw.api.time.sleep")
    def test_throttling_uses_retry_after(self, mock_sleep, client, boto_client):
        """A Retry-After header sets the delay."""
        boto_client.create_resource.side_effect = [
            client_error("TooManyRequestsException", 429, headers={"retry-after": "3"}),
            {"id": "new"},
        ]

        client.create_resource("api", "root", "items")

        mock_sleep.assert_called_once_with(3.0)

    @patch("pyapigw.api.time.sleep")
    def test_throttling_exhausts_retries(self, mock_sleep, client, boto_client):
        """After max_retries the rate limit error is raised."""
        boto_client.put_method.side_effect = client_error(
            "TooManyRequestsException", 429
        )

        with pytest.raises(GatewayRateLimitError):
            client.put_method("api", "res", "GET")

        assert boto_client.put_method.call_count == 3
        assert mock_sleep.call_count == 2

    @patch("pyapigw.api.time.sleep")
    def test_server_error_not_retried(self, mock_sleep, client, boto_client):
        """A 5xx may have been applied, so it is raised on the first call."""
        boto_client.create_deployment.side_effect = [
            client_error("InternalFailure", 500),
            {"id": "dep"},
        ]

        with pytest.raises(GatewayAPIError) as exc_info:
            client.create_deployment("api", "prod")

        assert exc_info.value.code == "InternalFailure"
        assert boto_client.create_deployment.call_count == 1
        mock_sleep.assert_not_called()

    @patch("pyapigw.api.time.sleep")
    def test_create_resource_unavailable_not_retried(
        self, mock_sleep, client, boto_client
    ):
        """A create answered with 503 is not sent a second time."""
        boto_client.create_resource.side_effect = [
            client_error("ServiceUnavailableException", 503),
            {"id": "new"},
        ]

        with pytest.raises(GatewayAPIError):
            client.create_resource("api", "root", "items")

        assert boto_client.create_resource.call_count == 1

    @patch("pyapigw.api.time.sleep")
    def test_network_error(self, mock_sleep, client, boto_client):
        """Connection failures become GatewayNetworkError without a retry."""
        boto_client.get_resources.side_effect = EndpointConnectionError(
            endpoint_url="https://apigateway.us-east-1.amazonaws.com"
        )

        with pytest.raises(GatewayNetworkError, match="Network error"):
            client.get_resources("api")

        assert boto_client.get_resources.call_count == 1
        mock_sleep.assert_not_called()

    def test_connect_timeout_is_network_error(self, client, boto_client):
        """Timeouts are connection errors too."""
        boto_client.delete_resource.side_effect = ConnectTimeoutError(
            endpoint_url="https://apigateway.us-east-1.amazonaws.com"
        )

        with pytest.raises(GatewayNetworkError):
            client.delete_resource("api", "res-1")

        assert boto_client.delete_resource.call_count == 1

    def test_partial_credentials(self, client, boto_client):
        """Half-configured credentials are an authentication error."""
        boto_client.get_resources.side_effect = PartialCredentialsError(
            provider="env", cred_var="AWS_SECRET_ACCESS_KEY"
        )

        with pytest.raises(GatewayAuthenticationError, match="Incomplete"):
            client.get_resources("api")

    def test_other_botocore_errors_wrapped(self, client, boto_client):
        """Any other botocore error becomes a GatewayAPIError."""
        boto_client.put_method.side_effect = NoRegionError()

        with pytest.raises(GatewayAPIError, match="region"):
            client.put_method("api", "res", "GET")

    def test_client_creation_errors_wrapped(self):
        """Errors building the boto3 client surface as GatewayAPIError."""
        session = Mock()
        session.client.side_effect = NoRegionError()
        client = GatewayClient(session=session)

        with pytest.raises(GatewayAPIError):
            client.get_resources("api")


class TestRetryDelay:
    """Tests for backoff calculation."""

    def test_exponential_backoff_with_jitter(self):
        """Delay doubles per attempt within +/- 25% jitter."""
        client = GatewayClient(client=Mock(), retry_delay=1.0)

        for attempt, base in [(0, 1.0), (1, 2.0), (2, 4.0)]:
            delay = client._calculate_retry_delay(attempt)
            assert base * 0.75 <= delay <= base * 1.25
