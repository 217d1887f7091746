#!/usr/bin/env python3
import sys
import logging

from argparse import ArgumentParser, Namespace
from typing import Optional, List

from sr201.client import RelayClient
from sr201.config import config
from sr201.errors import RelayError
from sr201.types import RelayConfig, RelayAction, PROTOCOLS, default_port

logger = logging.getLogger(__name__)


def make_parser() -> ArgumentParser:
    parser = ArgumentParser(description='Control an SR201 network relay board.')
    parser.add_argument('action', choices=RelayAction.names())
    parser.add_argument('--host', type=str,
                        help='device address')
    parser.add_argument('--port', type=int,
                        help='device port (default: 6722 for tcp, 6723 for udp)')
    parser.add_argument('--protocol', type=str, choices=list(PROTOCOLS.keys()),
                        help='transport protocol (default: tcp)')
    parser.add_argument('--relay', type=int,
                        help='relay channel (default: 1)')
    return parser


def resolve_config(arg: Namespace) -> RelayConfig:
    def value(name, default=None):
        v = getattr(arg, name)
        if v is None:
            v = config.get(f'sr201.{name}', default)
        return v

    host = value('host')
    if not host:
        raise ValueError('device host is not specified, use --host or sr201.host in config')

    protocol = str(value('protocol', 'tcp'))
    if protocol not in PROTOCOLS:
        raise ValueError(f'unsupported protocol {protocol}, expected one of: {", ".join(PROTOCOLS)}')

    return RelayConfig(host=host,
                       port=int(value('port', default_port(protocol))),
                       protocol=protocol,
                       relay=int(value('relay', 1)))


def main(argv: Optional[List[str]] = None) -> int:
    parser = make_parser()
    arg = config.load('sr201_util', parser=parser, args=argv)

    try:
        relay_config = resolve_config(arg)
    except ValueError as e:
        parser.error(str(e))

    try:
        with RelayClient(relay_config) as client:
            print(client.execute_action(arg.action))
    except RelayError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
