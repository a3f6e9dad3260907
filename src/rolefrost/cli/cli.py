import logging

import click

import rolefrost
from rolefrost.logger import GLOBAL_LOGGER as logger

VERBOSITY_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


@click.group(invoke_without_command=True, no_args_is_help=True)
@click.option(
    "-v", "--verbose", help="Increases log level with count, e.g -vv", count=True
)
@click.version_option(version=rolefrost.__version__, prog_name="rolefrost")
@click.pass_context
def cli(ctx, verbose):
    logger.setLevel(VERBOSITY_LEVELS[min(verbose, len(VERBOSITY_LEVELS) - 1)])

    ctx.ensure_object(dict)
