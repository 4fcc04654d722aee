"""Deployment engine for pyapigw - reconcile a declared tree and deploy it."""

from .bindings import MethodBinder, ResponseBinder
from .builder import ResourceBuilder, TreeSynchronizer
from .config import load_targets_from_json, parse_target, select_targets
from .context import DeployContext
from .engine import DeployResult, DeployState, SyncOrchestrator, deploy_target
from .publisher import DeploymentPublisher
from .pruner import Pruner
from .state import RemoteStateReader

__all__ = [
    "SyncOrchestrator",
    "DeployState",
    "DeployResult",
    "deploy_target",
    "DeployContext",
    "RemoteStateReader",
    "Pruner",
    "ResourceBuilder",
    "TreeSynchronizer",
    "MethodBinder",
    "ResponseBinder",
    "DeploymentPublisher",
    "load_targets_from_json",
    "parse_target",
    "select_targets",
]
