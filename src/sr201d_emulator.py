#!/usr/bin/env python3
from argparse import ArgumentParser

from sr201.config import config
from sr201.emulator import RelayEmulator
from sr201.types import TCP_PORT
from sr201.util import parse_addr


if __name__ == '__main__':
    parser = ArgumentParser()
    parser.add_argument('--listen', type=str, default=f'127.0.0.1:{TCP_PORT}',
                        help='host:port to listen on')
    parser.add_argument('--channels', type=int, default=8)
    parser.add_argument('--reply-delay', type=float, default=0,
                        help='seconds to wait before every reply')

    arg = config.load('sr201d_emulator', parser=parser)

    if 'sr201d' in config and 'listen' in config['sr201d'] and arg.listen == parser.get_default('listen'):
        addr = config.get_addr('sr201d.listen')
    else:
        addr = parse_addr(arg.listen)

    emulator = RelayEmulator(addr=addr,
                             channels=arg.channels,
                             reply_delay=arg.reply_delay)
    try:
        emulator.run()
    except KeyboardInterrupt:
        emulator.logger.info('Exiting...')
