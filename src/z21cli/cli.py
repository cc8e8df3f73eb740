"""
Entry point for the z21 command.
"""
import argparse
import logging
import sys

from configobj import ConfigObjError

from z21cli import __version__
from z21cli.app import AppContext
from z21cli.commands import can, context, info, monitor, power, status, sub
from z21cli.config.config import load_settings
from z21cli.errors import Z21Error

logger = logging.getLogger(__name__)

log_format = '%(asctime)s %(levelname)-5s %(name)s: %(message)s'


def version(app, args):
    app.print("z21 version %s" % __version__)


def build_parser():
    parser = argparse.ArgumentParser(prog='z21', description="CLI for Roco Z21 control station.")
    parser.add_argument('-v', '--verbose', action='store_true', help="enable verbose output")
    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True
    subparsers.add_parser('version', help="Print the version").set_defaults(handler=version)
    for module in (context, info, sub, monitor, status, power, can):
        module.register(subparsers)
    return parser


def configure_logging(verbose):
    logging.basicConfig(stream=sys.stderr, format=log_format, level=logging.DEBUG if verbose else logging.WARNING)


def main(argv=None, app=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    try:
        app = app or AppContext(load_settings())
    except ConfigObjError as e:
        sys.stderr.write("Error: %s\n" % e)
        return 1
    try:
        args.handler(app, args)
    except Z21Error as e:
        logger.debug("command failed", exc_info=True)
        sys.stderr.write("Error: %s\n" % e)
        return 1
    except KeyboardInterrupt:
        return 130
    finally:
        app.close()
    return 0


if __name__ == '__main__':  # pragma: no cover
    sys.exit(main())
