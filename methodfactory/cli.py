import logging

import click

from . import settings
from .exceptions import MethodFactoryError
from .factories import MethodInvokingFactory


@click.group()
@click.option("--log-level", default=settings.MF_LOG_LEVEL, show_default=True)
def main(log_level):
    logging.basicConfig(level=log_level.upper())


@main.command()
@click.argument("target", nargs=1)
@click.argument("args", nargs=-1)
@click.option(
    "--prototype",
    is_flag=True,
    default=False,
    help="Invoke the method on every request instead of caching the first result.",
)
@click.option(
    "--times",
    default=1,
    show_default=True,
    type=click.IntRange(min=1),
    help="Number of objects to request from the factory.",
)
def invoke(target, args, prototype, times):
    """Invoke TARGET (package.module.Class.method or package.module.function)
    with ARGS and print the repr of each produced object"""
    factory = MethodInvokingFactory(
        static_method=target, arguments=list(args), singleton=not prototype
    )
    try:
        factory.on_setup_complete()
        for _ in range(times):
            click.echo(repr(factory.produce()))
    except MethodFactoryError as e:
        raise click.ClickException(str(e)) from e


@main.command()
@click.argument("target", nargs=1)
@click.argument("args", nargs=-1)
def describe(target, args):
    """Show which method TARGET resolves to for ARGS"""
    factory = MethodInvokingFactory(static_method=target, arguments=list(args))
    try:
        resolved = factory.prepare()
    except MethodFactoryError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"method: {resolved.qualname}")
    click.echo(f"signature: {resolved.signature}")
    click.echo(f"returns: {factory.declared_result_type()!r}")
    click.echo(f"weight: {resolved.weight}")
