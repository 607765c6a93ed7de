import argparse
import asyncio
import logging
import sys
import typing

import uvicorn

from .config import Settings
from .gateway import check_subgraphs, write_configs
from .services import SUBGRAPHS, create_app


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='bookgraph', description='Book-swap GraphQL subgraphs.')
    parser.add_argument('--log-level', default=None, help='overrides LOG_LEVEL')
    commands = parser.add_subparsers(dest='command', required=True)

    serve = commands.add_parser('serve', help='run one subgraph with uvicorn')
    serve.add_argument('service', choices=sorted(SUBGRAPHS))
    serve.add_argument('--host', default=None)
    serve.add_argument('--port', type=int, default=None)

    gateway = commands.add_parser('gateway', help='federation gateway config')
    gateway_commands = gateway.add_subparsers(dest='gateway_command', required=True)
    compose = gateway_commands.add_parser('compose', help='write supergraph.yaml and router.yaml')
    compose.add_argument('--out', default='.', help='output directory')
    gateway_commands.add_parser('check', help='fetch the SDL of every subgraph')
    return parser


def serve(settings: Settings, args: argparse.Namespace) -> int:
    app = create_app(args.service, settings)
    uvicorn.run(
        app,
        host=args.host or settings.host,
        port=args.port or settings.port_for(args.service),
        log_level=settings.log_level.lower(),
    )
    return 0


def gateway(settings: Settings, args: argparse.Namespace) -> int:
    if args.gateway_command == 'compose':
        for path in write_configs(settings, args.out):
            print(path)
        return 0

    report = asyncio.run(check_subgraphs(settings))
    for name, failure in report.items():
        print(f'{name}: {failure or "ok"}')
    return 1 if any(report.values()) else 0


def main(argv: typing.Sequence[str] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(args.log_level or settings.log_level)
    if args.command == 'serve':
        return serve(settings, args)
    return gateway(settings, args)


if __name__ == '__main__':
    sys.exit(main())
