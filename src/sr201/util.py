from typing import Tuple

Addr = Tuple[str, int]  # network address type (host, port)


def parse_addr(addr: str) -> Addr:
    if addr.count(':') != 1:
        raise ValueError('invalid host:port format')

    host, port = addr.split(':')
    if not host:
        raise ValueError('empty host')

    port = int(port)
    if not 0 <= port <= 65535:
        raise ValueError('invalid port')

    return host, port
