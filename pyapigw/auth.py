"""Credential and region resolution for the API Gateway client."""

import json
import logging
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError

from .config import config
from .exceptions import GatewayConfigError
from .models import ConnectionOptions

logger = logging.getLogger(__name__)


def load_credentials_file(path: str) -> dict:
    """Load static credentials from a JSON file.

    The file uses the same keys as the AWS SDK config files:
    ``accessKeyId``, ``secretAccessKey`` and optionally ``sessionToken``
    and ``region``.

    Args:
        path: Path to the JSON credentials file

    Returns:
        Parsed credentials dictionary

    Raises:
        GatewayConfigError: If the file is missing, unreadable or incomplete
    """
    file_path = Path(path).expanduser()
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise GatewayConfigError(f"Credentials file not found: {file_path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise GatewayConfigError(
            f"Unable to read credentials file {file_path}: {e}"
        ) from e

    if not isinstance(data, dict):
        raise GatewayConfigError(f"Credentials file must hold an object: {file_path}")
    if not data.get("accessKeyId") or not data.get("secretAccessKey"):
        raise GatewayConfigError(
            f"Credentials file {file_path} needs accessKeyId and secretAccessKey"
        )
    return data


def create_session(options: Optional[ConnectionOptions] = None) -> boto3.Session:
    """Create a boto3 session from deploy options.

    Priority: named profile, static key pair, JSON credentials file, then
    the default credential chain (environment, shared files, instance role).

    Args:
        options: Credential and region options (environment defaults if None)

    Returns:
        Configured boto3 session

    Raises:
        GatewayConfigError: If the options cannot be turned into a session
    """
    options = options or ConnectionOptions()
    region = options.region or config.region
    profile = options.profile or config.profile

    try:
        if profile:
            logger.debug(f"Using credentials profile {profile}")
            return boto3.Session(profile_name=profile, region_name=region)

        if options.access_key_id and options.secret_access_key:
            logger.debug("Using static access key credentials")
            return boto3.Session(
                aws_access_key_id=options.access_key_id,
                aws_secret_access_key=options.secret_access_key,
                region_name=region,
            )

        if options.credentials_json:
            logger.debug(f"Using credentials file {options.credentials_json}")
            data = load_credentials_file(options.credentials_json)
            return boto3.Session(
                aws_access_key_id=data["accessKeyId"],
                aws_secret_access_key=data["secretAccessKey"],
                aws_session_token=data.get("sessionToken"),
                region_name=options.region or data.get("region") or region,
            )

        logger.debug("Using default credential chain")
        return boto3.Session(region_name=region)
    except BotoCoreError as e:
        # e.g. ProfileNotFound
        raise GatewayConfigError(f"Unable to create AWS session: {e}") from e
