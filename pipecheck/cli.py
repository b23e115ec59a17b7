#!/usr/bin/env python3
"""
Pipecheck CLI
A Python CLI tool for validating CI workflow definitions.
"""

import click

from pipecheck import __version__
from pipecheck.commands import check, steps


@click.group()
@click.version_option(version=__version__)
def cli():
    """Pipecheck CLI - Validate CI workflows against the pipeline contract."""
    pass


cli.add_command(check)
cli.add_command(steps)


def main():
    """Main entry point for the pipecheck CLI."""
    cli()


if __name__ == "__main__":
    main()
