"""CLI interface for pyapigw."""

import logging
from pathlib import Path
from typing import Any, Optional

import click
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.tree import Tree

from .api import GatewayClient
from .auth import create_session
from .config import config
from .deploy import deploy_target, load_targets_from_json, select_targets
from .exceptions import GatewayAPIError, GatewayConfigError
from .models import ConnectionOptions, DesiredNode, DeployTarget
from .output import OutputFormatter
from .utils import MAX_WORKERS_LIMIT

logger = logging.getLogger(__name__)


def build_client(options: ConnectionOptions) -> GatewayClient:
    """Create an authenticated client for the given connection options."""
    return GatewayClient(session=create_session(options))


def build_resource_tree(target: DeployTarget) -> Tree:
    """Render a target's declared resources as a rich tree.

    Args:
        target: Parsed deploy target

    Returns:
        Tree with one branch per resource and one leaf per method
    """
    tree = Tree(
        f"[bold]{target.name}[/bold] ({target.rest_api_id}) -> "
        f"stage [cyan]{target.deployment.stage_name}[/cyan]"
    )

    def add_children(branch: Tree, node: DesiredNode) -> None:
        for segment, child in node.children.items():
            child_branch = branch.add(f"[bold blue]{escape(segment)}[/bold blue]")
            for verb, method in child.methods.items():
                statuses = ", ".join(method.responses) or "no responses"
                child_branch.add(
                    f"[green]{verb}[/green] {method.integration.type} "
                    f"({statuses})"
                )
            add_children(child_branch, child)

    add_children(tree, target.resources)
    return tree


def _load_targets(
    config_file: Path, target_name: Optional[str]
) -> list[DeployTarget]:
    return select_targets(load_targets_from_json(config_file), target_name)


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pyapigw")
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """pyapigw - Deploy declarative resource trees to AWS API Gateway."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pyapigw").setLevel(logging.DEBUG)
        # boto is very chatty at DEBUG
        logging.getLogger("botocore").setLevel(logging.INFO)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.argument(
    "config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.argument("target", required=False)
@click.option("--profile", help="AWS credentials profile")
@click.option(
    "--access-key-id", envvar="PYAPIGW_ACCESS_KEY_ID", help="AWS access key id"
)
@click.option(
    "--secret-access-key",
    envvar="PYAPIGW_SECRET_ACCESS_KEY",
    help="AWS secret access key",
)
@click.option(
    "--credentials-json",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with accessKeyId/secretAccessKey",
)
@click.option("--region", help="AWS region (default: us-east-1)")
@click.option(
    "--max-workers",
    "-j",
    type=click.IntRange(1, MAX_WORKERS_LIMIT),
    default=None,
    help="Concurrent API calls while pruning and building (default: 1)",
)
@click.pass_context
def deploy(
    ctx: Any,
    config_file: Path,
    target: Optional[str],
    profile: Optional[str],
    access_key_id: Optional[str],
    secret_access_key: Optional[str],
    credentials_json: Optional[str],
    region: Optional[str],
    max_workers: Optional[int],
) -> None:
    """Delete all resources of TARGET's REST API, recreate them from
    CONFIG_FILE and deploy to the configured stage.

    Without TARGET every target in the file is deployed in order.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        targets = _load_targets(config_file, target)
    except GatewayConfigError as e:
        out.error(str(e))
        ctx.exit(1)

    workers = max_workers or config.max_workers
    results = []

    for deploy_config in targets:
        options = deploy_config.options.merged(
            profile=profile,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            credentials_json=credentials_json,
            region=region,
        )
        try:
            client = build_client(options)
        except GatewayConfigError as e:
            out.error(str(e))
            ctx.exit(1)

        result = deploy_target(deploy_config, client, workers, out)
        results.append((deploy_config, result))

        if not result.success:
            break

    if out.json_output:
        out.output_json(
            [dict(target=t.name, **result.to_dict()) for t, result in results]
        )
    else:
        for deploy_config, result in results:
            if result.success:
                out.print_summary(
                    "Deployment Complete",
                    [
                        ("Target", deploy_config.name),
                        ("Stage", deploy_config.deployment.stage_name),
                        ("Deleted", str(result.deleted)),
                        ("Created", str(result.created)),
                        ("Deployment", result.deployment_id or "-"),
                    ],
                )

    failed = [result for _, result in results if not result.success]
    if failed:
        out.error(failed[0].message)
        ctx.exit(1)


@main.command()
@click.argument(
    "config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.argument("target", required=False)
@click.pass_context
def validate(ctx: Any, config_file: Path, target: Optional[str]) -> None:
    """Check CONFIG_FILE and show the declared resource tree.

    No API calls are made.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        targets = _load_targets(config_file, target)
    except GatewayConfigError as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        out.output_json(
            [
                {
                    "target": t.name,
                    "rest_api_id": t.rest_api_id,
                    "stage": t.deployment.stage_name,
                    "resources": [path for path, _ in t.resources.walk()],
                }
                for t in targets
            ]
        )
        return

    for deploy_config in targets:
        out.output_tree(build_resource_tree(deploy_config))
    out.success(f"✓ {len(targets)} target(s) valid")


@main.command()
@click.argument("rest_api_id")
@click.option("--profile", help="AWS credentials profile")
@click.option(
    "--credentials-json",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with accessKeyId/secretAccessKey",
)
@click.option("--region", help="AWS region (default: us-east-1)")
@click.pass_context
def resources(
    ctx: Any,
    rest_api_id: str,
    profile: Optional[str],
    credentials_json: Optional[str],
    region: Optional[str],
) -> None:
    """List the resources currently defined on REST_API_ID."""
    out: OutputFormatter = ctx.obj["out"]
    options = ConnectionOptions(
        profile=profile, credentials_json=credentials_json, region=region
    )

    try:
        client = build_client(options)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            disable=out.quiet or out.json_output,
        ) as progress:
            progress.add_task("Fetching resources...", total=None)
            items = client.get_resources(rest_api_id)
    except (GatewayConfigError, GatewayAPIError) as e:
        out.error(f"Unable to fetch API resources: {e}")
        ctx.exit(1)

    rows = sorted(
        (
            {
                "path": item.get("path", ""),
                "id": item.get("id", ""),
                "methods": ", ".join(sorted(item.get("resourceMethods", {}))),
            }
            for item in items
        ),
        key=lambda row: row["path"],
    )
    out.output_table(
        rows,
        ["path", "id", "methods"],
        {"path": "Path", "id": "Id", "methods": "Methods"},
    )


if __name__ == "__main__":
    main()
