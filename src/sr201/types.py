import socket

from enum import Enum
from dataclasses import dataclass
from typing import Tuple

from .errors import UnknownActionError
from .util import Addr

TCP_PORT = 6722
UDP_PORT = 6723

# protocol name -> (address family, socket type)
PROTOCOLS = {
    'tcp':  (socket.AF_UNSPEC, socket.SOCK_STREAM),
    'tcp4': (socket.AF_INET, socket.SOCK_STREAM),
    'tcp6': (socket.AF_INET6, socket.SOCK_STREAM),
    'udp':  (socket.AF_UNSPEC, socket.SOCK_DGRAM),
    'udp4': (socket.AF_INET, socket.SOCK_DGRAM),
    'udp6': (socket.AF_INET6, socket.SOCK_DGRAM),
}


def default_port(protocol: str) -> int:
    return UDP_PORT if protocol.startswith('udp') else TCP_PORT


@dataclass(frozen=True)
class RelayConfig:
    host: str
    port: int
    protocol: str = 'tcp'
    relay: int = 1

    @property
    def addr(self) -> Addr:
        return self.host, self.port

    def socket_params(self) -> Tuple[int, int]:
        return PROTOCOLS[self.protocol]


class RelayAction(Enum):
    STATUS = 'status'
    OPEN = 'open'
    CLOSE = 'close'

    @classmethod
    def parse(cls, action) -> 'RelayAction':
        if isinstance(action, cls):
            return action
        try:
            return cls(action)
        except ValueError:
            raise UnknownActionError(str(action)) from None

    @classmethod
    def names(cls):
        return [a.value for a in cls]
