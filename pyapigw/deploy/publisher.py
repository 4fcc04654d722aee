"""Publishing a deployment of the rebuilt API to a stage."""

import logging
from typing import Any

from ..exceptions import DeploymentError, GatewayAPIError
from ..models import DeploymentSpec
from .context import DeployContext

logger = logging.getLogger(__name__)


class DeploymentPublisher:
    """Creates a deployment snapshot bound to a named stage."""

    def __init__(self, context: DeployContext):
        self.context = context

    def publish(self, spec: DeploymentSpec) -> dict[str, Any]:
        """Deploy the current API definition.

        Args:
            spec: Stage name, cache options, descriptions and stage variables

        Returns:
            Deployment response from the control plane

        Raises:
            DeploymentError: If the deployment call fails (never retried here)
        """
        logger.info(f"Deploy to stage {spec.stage_name}")
        try:
            response = self.context.client.create_deployment(
                self.context.rest_api_id,
                spec.stage_name,
                cache_cluster_enabled=spec.cache_cluster_enabled,
                cache_cluster_size=spec.cache_cluster_size,
                description=spec.description,
                stage_description=spec.stage_description,
                variables=spec.variables,
            )
        except GatewayAPIError as e:
            raise DeploymentError(spec.stage_name, e) from e
        return response if isinstance(response, dict) else {}
