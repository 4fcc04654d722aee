"""Shared fixtures for pyapigw tests."""

from unittest.mock import Mock

import pytest

from pyapigw.api import GatewayClient
from pyapigw.deploy.context import DeployContext
from pyapigw.models import RemoteResource


def fake_create_resource(rest_api_id, parent_id, path_part):
    """Mimic create_resource: the id is derived from the path part."""
    return {"id": f"id-{path_part}", "parentId": parent_id, "pathPart": path_part}


@pytest.fixture
def mock_client():
    """Create a mock API Gateway client that succeeds on every call."""
    client = Mock(spec=GatewayClient)
    client.get_resources.return_value = [{"id": "root", "path": "/"}]
    client.create_resource.side_effect = fake_create_resource
    client.create_deployment.return_value = {"id": "dep-1"}
    return client


@pytest.fixture
def context(mock_client):
    """Create a sequential deploy context around the mock client."""
    return DeployContext(client=mock_client, rest_api_id="api-1")


@pytest.fixture
def root_resource():
    """The remote root resource."""
    return RemoteResource(id="root", path="/")

