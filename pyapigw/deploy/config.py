"""Loading deploy targets from a JSON declaration file."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from ..exceptions import DeployConfigError
from ..models import ConnectionOptions, DeploymentSpec, DesiredNode, DeployTarget

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("restApiId", "resources", "deployment")


def parse_target(name: str, data: Any) -> DeployTarget:
    """Parse one named target.

    Args:
        name: Target name
        data: Target mapping with restApiId, resources, deployment and
            optional options

    Returns:
        Validated DeployTarget

    Raises:
        DeployConfigError: If a required key is missing or a value is invalid
    """
    if not isinstance(data, dict):
        raise DeployConfigError(f"Target '{name}' must be an object")

    for key in REQUIRED_KEYS:
        if data.get(key) in (None, ""):
            raise DeployConfigError(f"Required config property '{name}.{key}' missing")

    return DeployTarget(
        name=name,
        rest_api_id=str(data["restApiId"]),
        resources=DesiredNode.root(data["resources"]),
        deployment=DeploymentSpec.from_dict(data["deployment"], f"{name}.deployment"),
        options=ConnectionOptions.from_dict(data.get("options"), f"{name}.options"),
    )


def load_targets_from_json(path: Path) -> dict[str, DeployTarget]:
    """Load every deploy target from a JSON file.

    The file maps target names to target objects; targets keep file order.

    Args:
        path: Path to the JSON declaration

    Returns:
        Dictionary mapping target name to DeployTarget

    Raises:
        DeployConfigError: If the file is missing, not valid JSON, or invalid

    Examples:
        >>> targets = load_targets_from_json(Path("apigateway.json"))
        >>> targets["production"].deployment.stage_name
        'prod'
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise DeployConfigError(f"Config file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise DeployConfigError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise DeployConfigError(f"Unable to read {path}: {e}") from e

    if not isinstance(data, dict) or not data:
        raise DeployConfigError(f"{path} must hold an object with at least one target")

    targets = {name: parse_target(name, value) for name, value in data.items()}
    logger.debug(f"Loaded {len(targets)} target(s) from {path}")
    return targets


def select_targets(
    targets: dict[str, DeployTarget], name: Optional[str] = None
) -> list[DeployTarget]:
    """Return the named target, or all targets in file order.

    Raises:
        DeployConfigError: If ``name`` is not defined
    """
    if name is None:
        return list(targets.values())
    if name not in targets:
        available = ", ".join(targets) or "none"
        raise DeployConfigError(f"Unknown target '{name}' (available: {available})")
    return [targets[name]]
