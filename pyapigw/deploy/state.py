"""Reading the current remote resource tree."""

import logging

from ..exceptions import FetchError, GatewayError, RootNotFoundError
from ..models import RemoteResource
from .context import DeployContext

logger = logging.getLogger(__name__)


class RemoteStateReader:
    """Fetches the flat list of remote resources and locates the root."""

    def __init__(self, context: DeployContext):
        self.context = context

    def list_resources(self) -> list[RemoteResource]:
        """Fetch every resource currently defined on the REST API.

        The order of the returned list is whatever the control plane reports.

        Raises:
            FetchError: If the listing call fails
        """
        try:
            items = self.context.client.get_resources(self.context.rest_api_id)
        except GatewayError as e:
            raise FetchError(e) from e

        resources = [RemoteResource.from_api(item) for item in items]
        logger.debug(
            f"Fetched {len(resources)} resource(s) from {self.context.rest_api_id}"
        )
        return resources

    @staticmethod
    def find_root(resources: list[RemoteResource]) -> RemoteResource:
        """Return the resource whose path is ``/``.

        Raises:
            RootNotFoundError: If no such resource exists
        """
        for resource in resources:
            if resource.is_root:
                return resource
        raise RootNotFoundError()
