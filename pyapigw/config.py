"""Configuration defaults for pyapigw."""

import logging
import os
from typing import Optional

from .utils import DEFAULT_MAX_WORKERS, DEFAULT_REGION, clamp_workers

logger = logging.getLogger(__name__)


class Config:
    """Default settings read from the environment.

    Only plain values live here. Clients and API ids are created per run and
    passed around explicitly.
    """

    @property
    def region(self) -> str:
        """Region used when neither the CLI nor the declaration sets one."""
        return (
            os.environ.get("PYAPIGW_REGION")
            or os.environ.get("AWS_REGION")
            or os.environ.get("AWS_DEFAULT_REGION")
            or DEFAULT_REGION
        )

    @property
    def profile(self) -> Optional[str]:
        """Named credentials profile, if any."""
        return os.environ.get("PYAPIGW_PROFILE") or None

    @property
    def max_workers(self) -> int:
        """Concurrent in-flight calls inside a stage."""
        value = os.environ.get("PYAPIGW_MAX_WORKERS")
        if not value:
            return DEFAULT_MAX_WORKERS
        try:
            return clamp_workers(int(value))
        except ValueError:
            logger.warning(f"Ignoring invalid PYAPIGW_MAX_WORKERS value: {value!r}")
            return DEFAULT_MAX_WORKERS


config = Config()
