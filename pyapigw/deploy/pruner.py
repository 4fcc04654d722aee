"""Deleting stale remote resources before the tree is rebuilt."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from ..exceptions import DeleteError, GatewayAPIError, GatewayNotFoundError
from ..models import RemoteResource
from .context import DeployContext

logger = logging.getLogger(__name__)


class Pruner:
    """Deletes every remote resource except the root.

    Deleting a parent removes its descendants on the server, so deletes of
    resources that are already gone are expected and count as success.
    """

    def __init__(self, context: DeployContext):
        self.context = context

    def prune(self, resources: list[RemoteResource]) -> int:
        """Delete the given resources, skipping the root if present.

        Args:
            resources: Remote resources to delete, in any order

        Returns:
            Number of resources actually deleted by this call

        Raises:
            DeleteError: On the first delete that fails for a reason other
                than the resource being absent
        """
        targets = [resource for resource in resources if not resource.is_root]
        if not targets:
            return 0

        max_workers = min(self.context.max_workers, len(targets))
        if max_workers <= 1:
            return sum(self.delete_resource(resource) for resource in targets)

        logger.debug(f"Deleting {len(targets)} resource(s) with {max_workers} workers")
        deleted = 0
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(self.delete_resource, resource): resource
                for resource in targets
            }
            try:
                for future in as_completed(futures):
                    deleted += future.result()
            except DeleteError:
                for future in futures:
                    future.cancel()
                raise
        return deleted

    def delete_resource(self, resource: RemoteResource) -> bool:
        """Delete one resource.

        Returns:
            True if the resource was deleted, False if it was already gone

        Raises:
            DeleteError: If the delete fails for any other reason
        """
        logger.info(f"Delete resource: {resource.path}")
        try:
            self.context.client.delete_resource(self.context.rest_api_id, resource.id)
        except GatewayNotFoundError:
            logger.debug(f"{resource.path} already deleted")
            return False
        except GatewayAPIError as e:
            raise DeleteError(resource.path, e) from e
        return True
