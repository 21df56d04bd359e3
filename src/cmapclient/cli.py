"""Command-line interface for cmapclient.

Thin Typer wrappers around ``cmapclient.CMAP``. Tables are written as CSV
to stdout or to the file given with ``--output``.
"""
from pathlib import Path
from typing import Optional

import typer

from . import config
from .api import CMAP
from .credentials import CredentialProvider
from .errors import CMAPError

app = typer.Typer(no_args_is_help=True)

OutputOption = typer.Option(None, "--output", "-o", help="Write the table to this CSV file")
EnvOption = typer.Option("DEFAULT", help="Settings environment to use")


@app.callback()
def callback():
    """
    Query oceanographic data sets hosted by the Simons CMAP database.
    """


def _run(func, output, env):
    if env != "DEFAULT":
        config.change_env(env)
    try:
        df = func(CMAP())
    except CMAPError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    if output is None:
        typer.echo(df.to_csv(index=False), nl=False)
    else:
        df.to_csv(output, index=False)
        typer.echo(f"Wrote {len(df)} rows to {output}")


@app.command("set-key")
def set_key(api_key: str = typer.Argument(..., help="Your CMAP API key")):
    """Store the API key on this machine permanently."""
    provider = CredentialProvider()
    shadowing = provider.shadowing_env_key(api_key)
    provider.set_key(api_key)
    typer.echo("API key stored.")
    if shadowing:
        typer.echo(f"Warning: {provider.env_var} is set to a different key in "
                   "this shell and will take precedence in new sessions. "
                   f"Unset or update {provider.env_var}.", err=True)


@app.command()
def query(sql: str,
          output: Optional[Path] = OutputOption,
          env: str = EnvOption):
    """Run a custom query."""
    _run(lambda cmap: cmap.query(sql), output, env)


@app.command()
def search(keywords: str,
           output: Optional[Path] = OutputOption,
           env: str = EnvOption):
    """Search the variable catalog with space separated keywords."""
    _run(lambda cmap: cmap.search_catalog(keywords), output, env)


@app.command()
def datasets(output: Optional[Path] = OutputOption,
             env: str = EnvOption):
    """List the hosted data sets."""
    _run(lambda cmap: cmap.datasets(), output, env)


@app.command()
def head(table: str,
         rows: int = typer.Option(5, "--rows", "-n", help="Number of records"),
         output: Optional[Path] = OutputOption,
         env: str = EnvOption):
    """Show the top records of a data set."""
    _run(lambda cmap: cmap.head(table, rows), output, env)


@app.command()
def columns(table: str,
            output: Optional[Path] = OutputOption,
            env: str = EnvOption):
    """List the columns of a data set."""
    _run(lambda cmap: cmap.columns(table), output, env)


@app.command()
def cruise(name: str,
           output: Optional[Path] = OutputOption,
           env: str = EnvOption):
    """Show the space-time bounds of a cruise."""
    _run(lambda cmap: cmap.cruise_bounds(name), output, env)


if __name__ == "__main__":
    app()
