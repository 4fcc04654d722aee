"""Utility functions and constants for pyapigw."""

from typing import Any, Optional

# =============================================================================
# Constants for control-plane access
# =============================================================================

# API Gateway API version pinned by the deploy task
API_VERSION: str = "2015-07-09"

DEFAULT_REGION: str = "us-east-1"

# Retry configuration for throttled requests
DEFAULT_MAX_RETRIES: int = 3
DEFAULT_RETRY_DELAY: float = 1.0  # seconds

# Page size used when listing resources (service maximum)
RESOURCES_PAGE_SIZE: int = 500

# =============================================================================
# Constants for the deployment engine
# =============================================================================

DEFAULT_MAX_WORKERS: int = 1
MAX_WORKERS_LIMIT: int = 16

HTTP_METHODS: frozenset[str] = frozenset(
    {"GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS", "ANY"}
)


# =============================================================================
# Request helpers
# =============================================================================


def drop_none(params: dict[str, Any]) -> dict[str, Any]:
    """Remove keys whose value is None from a request dictionary.

    boto3 validates parameter types before sending, so optional fields that
    were not declared must be left out instead of being passed as None.

    Args:
        params: Request parameters

    Returns:
        New dictionary without None values
    """
    return {key: value for key, value in params.items() if value is not None}


def join_path(parent_path: str, path_part: str) -> str:
    """Join a parent resource path and a child path part.

    Args:
        parent_path: Full path of the parent (e.g. "/" or "/items")
        path_part: Path part without leading slash (e.g. "{id}")

    Returns:
        Full path of the child (e.g. "/items/{id}")

    Examples:
        >>> join_path("/", "items")
        '/items'
        >>> join_path("/items", "{id}")
        '/items/{id}'
    """
    prefix = "" if parent_path == "/" else parent_path.rstrip("/")
    return f"{prefix}/{path_part}"


def clamp_workers(max_workers: Optional[int]) -> int:
    """Bound a requested worker count to the supported range.

    Args:
        max_workers: Requested number of workers (None uses the default)

    Returns:
        Worker count between 1 and MAX_WORKERS_LIMIT
    """
    if max_workers is None:
        return DEFAULT_MAX_WORKERS
    return max(1, min(int(max_workers), MAX_WORKERS_LIMIT))
