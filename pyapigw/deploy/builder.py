"""Creating the declared resource tree on the control plane."""

import logging
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

from ..exceptions import DeployError, GatewayAPIError, ResourceCreateError
from ..models import DesiredNode, RemoteResource
from ..utils import join_path
from .bindings import MethodBinder
from .context import DeployContext

logger = logging.getLogger(__name__)


class ResourceBuilder:
    """Creates one resource node and binds its methods."""

    def __init__(self, context: DeployContext):
        self.context = context
        self.method_binder = MethodBinder(context)

    def create_resource(
        self, segment: str, spec: DesiredNode, parent: RemoteResource
    ) -> RemoteResource:
        """Create ``segment`` under ``parent`` and bind all declared methods.

        Methods are bound in declared order; the first failing method stops
        the remaining ones.

        Args:
            segment: Path segment with its leading slash (e.g. "/items")
            spec: Declared node
            parent: Already existing parent resource

        Returns:
            The created resource

        Raises:
            ResourceCreateError: If the resource itself cannot be created
            DeployError: If binding one of its methods fails
        """
        path_part = segment[1:]
        full_path = join_path(parent.path, path_part)
        logger.info(f"{full_path} Create resource")

        try:
            data = self.context.client.create_resource(
                self.context.rest_api_id, parent.id, path_part
            )
        except GatewayAPIError as e:
            raise ResourceCreateError(full_path, e) from e

        resource = RemoteResource(
            id=data["id"],
            path=data.get("path") or full_path,
            parent_id=data.get("parentId", parent.id),
            path_part=data.get("pathPart", path_part),
        )

        for verb, method in spec.methods.items():
            self.method_binder.bind_method(resource, verb, method)

        return resource


class TreeSynchronizer:
    """Walks the declared tree and creates every node under its parent.

    A child is only scheduled once its parent's create call succeeded. With
    one worker the walk is depth-first in declared order; with more workers
    independent siblings and subtrees are created concurrently. The first
    error stops the walk; nodes created so far stay on the remote side.
    """

    def __init__(self, context: DeployContext):
        self.context = context
        self.builder = ResourceBuilder(context)

    def build_tree(self, desired_root: DesiredNode, anchor: RemoteResource) -> int:
        """Create all children of ``desired_root`` below ``anchor``.

        Args:
            desired_root: Declared node whose children should exist
            anchor: Remote resource standing for ``desired_root``

        Returns:
            Number of resources created

        Raises:
            DeployError: The first failure at any node
        """
        if self.context.max_workers <= 1:
            return self._build_sequential(desired_root, anchor)
        return self._build_concurrent(desired_root, anchor)

    def _build_sequential(self, node: DesiredNode, parent: RemoteResource) -> int:
        created = 0
        for segment, child in node.children.items():
            resource = self.builder.create_resource(segment, child, parent)
            created += 1 + self._build_sequential(child, resource)
        return created

    def _build_concurrent(self, root: DesiredNode, anchor: RemoteResource) -> int:
        created = 0
        logger.debug(f"Building tree with {self.context.max_workers} workers")

        with ThreadPoolExecutor(max_workers=self.context.max_workers) as executor:
            pending: dict[Future, DesiredNode] = {}

            def schedule(node: DesiredNode, parent: RemoteResource) -> None:
                for segment, child in node.children.items():
                    future = executor.submit(
                        self.builder.create_resource, segment, child, parent
                    )
                    pending[future] = child

            schedule(root, anchor)
            while pending:
                done, _ = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    child = pending.pop(future)
                    try:
                        resource = future.result()
                    except DeployError:
                        for other in pending:
                            other.cancel()
                        raise
                    created += 1
                    schedule(child, resource)

        return created
