import logging
import sys
from pathlib import Path
from typing import List, Optional

import kubernetes
import typer
from typing_extensions import Annotated

from dotenv import load_dotenv, find_dotenv

load_dotenv(find_dotenv())

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Infrastructure manager: runtime operator and shoot restore tool",
    add_completion=False,
)


def read_runtime_ids(runtime_ids_file, runtime_ids):
    """Collect runtime ids from a file (one per line) and the command line, keeping order."""
    ids = []
    if runtime_ids_file is not None:
        for line in runtime_ids_file.read_text().splitlines():
            line = line.strip()
            if line and not line.startswith("#"):
                ids.append(line)
    ids.extend(runtime_ids or [])
    return list(dict.fromkeys(ids))


@app.command("operator")
def run_operator():
    """Run the Kubernetes operator (connects to cluster)."""
    from infra_manager.main import main

    main()


@app.command("restore")
def restore(
    backup_dir: Annotated[
        Path, typer.Option("--backup-dir", help="Directory holding the backup/ tree")
    ],
    gardener_project: Annotated[
        str, typer.Option("--gardener-project", help="Gardener project name")
    ],
    output_path: Annotated[
        Path, typer.Option("--output-path", help="Directory for the restore report")
    ] = Path("."),
    runtime_ids_file: Annotated[
        Optional[Path],
        typer.Option("--runtime-ids-file", help="File with one runtime id per line"),
    ] = None,
    runtime_id: Annotated[
        Optional[List[str]], typer.Option("--runtime-id", help="Runtime id to restore")
    ] = None,
    gardener_kubeconfig: Annotated[
        Optional[str], typer.Option("--gardener-kubeconfig", help="Gardener kubeconfig path")
    ] = None,
    kcp_kubeconfig: Annotated[
        Optional[str], typer.Option("--kcp-kubeconfig", help="Control plane kubeconfig path")
    ] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Classify without applying")] = False,
    restore_crb: Annotated[
        bool, typer.Option("--restore-crb/--no-restore-crb", help="Restore ClusterRoleBindings")
    ] = True,
    restore_oidc: Annotated[
        bool, typer.Option("--restore-oidc", help="Restore OpenIDConnect objects")
    ] = False,
    field_manager: Annotated[
        str, typer.Option("--field-manager", help="Field manager for applied objects")
    ] = "kim",
    timeout: Annotated[float, typer.Option("--timeout", help="API call timeout in seconds")] = 20.0,
):
    """Re-apply backed up shoots that changed exactly once since the backup."""
    from infra_manager.config import RestoreConfig
    from infra_manager.gardener.client import ShootClient
    from infra_manager.restore.backup_reader import BackupReader
    from infra_manager.restore.cluster_client import ClusterClientAccessor
    from infra_manager.restore.output_writer import OutputWriter
    from infra_manager.restore.restorer import Restore

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    ids = read_runtime_ids(runtime_ids_file, runtime_id)
    if not ids:
        typer.echo("No runtime ids given")
        raise typer.Exit(1)

    config = RestoreConfig(
        backup_dir=backup_dir,
        output_path=output_path,
        gardener_project=gardener_project,
        kubeconfig=kcp_kubeconfig,
        is_dry_run=dry_run,
        restore_crb=restore_crb,
        restore_oidc=restore_oidc,
        field_manager=field_manager,
        api_timeout=timeout,
    )

    try:
        gardener_client = kubernetes.config.new_client_from_config(config_file=gardener_kubeconfig)
        kcp_client = kubernetes.config.new_client_from_config(config_file=config.kubeconfig)
    except Exception as e:
        typer.echo(f"Failed to load kubeconfig: {e}")
        sys.exit(1)

    restorer = Restore(
        config,
        ShootClient(
            f"garden-{config.gardener_project}",
            api_client=gardener_client,
            field_manager=config.field_manager,
            timeout=config.api_timeout,
        ),
        BackupReader(config.backup_dir, config.restore_crb, config.restore_oidc),
        ClusterClientAccessor(kcp_client, config.field_manager, config.api_timeout),
        OutputWriter(config.output_path),
    )
    results = restorer.do(ids)

    summary = results.summary()
    typer.echo(
        f"Restored: {summary['succeeded']}, failed: {summary['failed']}, "
        f"skipped: {summary['skipped']}, manual restore required: {summary['updateDetected']}"
    )
    if results.failed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
