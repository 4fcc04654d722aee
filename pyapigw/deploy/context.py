"""Per-run context shared by the deployment components."""

from dataclasses import dataclass

from ..api import GatewayClient
from ..utils import DEFAULT_MAX_WORKERS


@dataclass(frozen=True)
class DeployContext:
    """Read-only handles for one deployment run.

    Built once per run and handed to every component; safe to share across
    worker threads.
    """

    client: GatewayClient
    """Authenticated control-plane client"""

    rest_api_id: str
    """REST API being reconciled"""

    max_workers: int = DEFAULT_MAX_WORKERS
    """Concurrent in-flight calls allowed inside a stage"""
