# cli.py
import click

from errors import SpoolError
from models import SpoolConfig
from storage import Storage
from worker import Worker


@click.command()
@click.argument("spool_root", required=False, envvar="SPOOL_ROOT", type=click.Path(file_okay=False))
def cli(spool_root):
    """spoolctl - run executable jobs dropped into SPOOL_ROOT/incoming, one at a time"""
    try:
        config = SpoolConfig.from_env(root=spool_root)
        db = Storage(config)
        db.check_layout()
    except SpoolError as e:
        raise click.ClickException(str(e))

    w = Worker(config, storage=db)
    click.echo(f"🚀 Spooling {config.root} on {config.machine} (idle sleep {config.min_sleep}-{config.max_sleep}s)")
    click.echo("Press Ctrl+C to stop.")
    try:
        w.run()
    except KeyboardInterrupt:
        click.echo("\n🛑 Spooler stopped.")


# ---------------- Entrypoint ----------------
if __name__ == "__main__":
    cli()
