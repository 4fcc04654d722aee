"""Orchestration of a full deployment run."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..api import GatewayClient
from ..exceptions import DeployError
from ..models import DeploymentSpec, DeployTarget, DesiredNode
from ..output import OutputFormatter
from ..utils import clamp_workers
from .builder import TreeSynchronizer
from .context import DeployContext
from .publisher import DeploymentPublisher
from .pruner import Pruner
from .state import RemoteStateReader

logger = logging.getLogger(__name__)


class DeployState(str, Enum):
    """States of a deployment run."""

    IDLE = "idle"
    """Not started"""

    FETCHING_STATE = "fetching_state"
    """Listing remote resources"""

    PRUNING = "pruning"
    """Deleting every non-root resource"""

    BUILDING_TREE = "building_tree"
    """Creating declared resources, methods and responses"""

    DEPLOYING = "deploying"
    """Creating the stage deployment"""

    DONE = "done"
    """Finished successfully"""

    FAILED = "failed"
    """Stopped at the first error"""

    @property
    def is_terminal(self) -> bool:
        return self in (DeployState.DONE, DeployState.FAILED)


_STAGE_ORDER = [
    DeployState.IDLE,
    DeployState.FETCHING_STATE,
    DeployState.PRUNING,
    DeployState.BUILDING_TREE,
    DeployState.DEPLOYING,
    DeployState.DONE,
]


@dataclass
class DeployResult:
    """Terminal outcome of one run."""

    state: DeployState
    failed_stage: Optional[DeployState] = None
    """Stage that was running when the error occurred"""

    error: Optional[DeployError] = None
    deleted: int = 0
    created: int = 0
    deployment_id: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.state == DeployState.DONE

    @property
    def message(self) -> str:
        if self.success:
            return f"Deployed {self.created} resource(s)"
        stage = self.failed_stage.value if self.failed_stage else "unknown"
        return f"Failed during {stage}: {self.error}"

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "state": self.state.value,
            "failed_stage": self.failed_stage.value if self.failed_stage else None,
            "error": str(self.error) if self.error else None,
            "deleted": self.deleted,
            "created": self.created,
            "deployment_id": self.deployment_id,
        }


class SyncOrchestrator:
    """Runs fetch, prune, build and deploy as strictly sequential stages.

    An orchestrator handles exactly one run; transitions only move forward
    and ``FAILED`` can be entered from any started stage.
    """

    def __init__(
        self,
        context: DeployContext,
        output: Optional[OutputFormatter] = None,
    ):
        """Initialize the orchestrator.

        Args:
            context: Client and REST API id for this run
            output: Output formatter for displaying progress/status
        """
        self.context = context
        self.output = output or OutputFormatter()
        self.state = DeployState.IDLE
        self.reader = RemoteStateReader(context)
        self.pruner = Pruner(context)
        self.synchronizer = TreeSynchronizer(context)
        self.publisher = DeploymentPublisher(context)

    def _transition(self, state: DeployState) -> None:
        if self.state.is_terminal:
            raise RuntimeError(f"Run already finished ({self.state.value})")
        if state != DeployState.FAILED:
            current = _STAGE_ORDER.index(self.state)
            if _STAGE_ORDER.index(state) != current + 1:
                raise RuntimeError(
                    f"Invalid transition {self.state.value} -> {state.value}"
                )
        logger.debug(f"{self.context.rest_api_id}: {self.state.value} -> {state.value}")
        self.state = state

    def run(self, resources: DesiredNode, deployment: DeploymentSpec) -> DeployResult:
        """Reconcile the REST API with ``resources`` and deploy it.

        Args:
            resources: Declared tree (children of the API root)
            deployment: Stage to deploy to

        Returns:
            DeployResult in state DONE or FAILED

        Examples:
            >>> context = DeployContext(client, "a1b2c3")
            >>> result = SyncOrchestrator(context).run(tree, DeploymentSpec("prod"))
            >>> result.success
            True
        """
        if self.state != DeployState.IDLE:
            raise RuntimeError("SyncOrchestrator instances run only once")

        result = DeployResult(state=self.state)
        try:
            self._transition(DeployState.FETCHING_STATE)
            remote = self.reader.list_resources()
            root = self.reader.find_root(remote)

            self._transition(DeployState.PRUNING)
            stale = [resource for resource in remote if not resource.is_root]
            if not self.output.quiet:
                self.output.info(f"Deleting {len(stale)} existing resource(s)")
            result.deleted = self.pruner.prune(stale)

            self._transition(DeployState.BUILDING_TREE)
            if not self.output.quiet:
                total = sum(1 for _ in resources.walk())
                self.output.info(f"Creating {total} resource(s)")
            result.created = self.synchronizer.build_tree(resources, root)

            self._transition(DeployState.DEPLOYING)
            if not self.output.quiet:
                self.output.info(f"Deploying to stage {deployment.stage_name}")
            response = self.publisher.publish(deployment)
            result.deployment_id = response.get("id")
        except DeployError as e:
            result.failed_stage = self.state
            result.error = e
            self._transition(DeployState.FAILED)
            logger.debug(f"Run failed during {result.failed_stage.value}: {e}")
        else:
            self._transition(DeployState.DONE)

        result.state = self.state
        return result


def deploy_target(
    target: DeployTarget,
    client: GatewayClient,
    max_workers: Optional[int] = None,
    output: Optional[OutputFormatter] = None,
) -> DeployResult:
    """Run the full pipeline for one declared target.

    Args:
        target: Parsed target from the declaration file
        client: Authenticated control-plane client
        max_workers: Concurrent calls inside a stage (default: sequential)
        output: Output formatter for displaying progress/status

    Returns:
        DeployResult of the run
    """
    context = DeployContext(
        client=client,
        rest_api_id=target.rest_api_id,
        max_workers=clamp_workers(max_workers),
    )
    output = output or OutputFormatter()
    if not output.quiet:
        output.info(f"Target {target.name}: REST API {target.rest_api_id}")
    return SyncOrchestrator(context, output).run(target.resources, target.deployment)
