import socket
import logging
import time

from typing import Optional, Union

from .errors import (
    RelayConnectionError,
    WriteError,
    ReadError,
    ReadTimeoutError,
    ActionError
)
from .types import RelayConfig, RelayAction

logger = logging.getLogger(__name__)


class RelayClient:
    """
    Client for SR201 network relay boards.

    Every command is a short ASCII string written as is, and the reply is
    whatever a single read returns. One exchange at a time; the client does
    no locking, so share it between threads only behind an external lock.
    """

    CONNECT_TIMEOUT = 5
    TIMEOUT = 5
    BUFFER_SIZE = 4096

    config: RelayConfig
    sock: Optional[socket.socket]

    def __init__(self, config: RelayConfig):
        self.config = config
        self.sock = None
        self.sock = self._dial()

    def __del__(self):
        try:
            self.close()
        except OSError:
            pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def relay(self) -> int:
        return self.config.relay

    def _dial(self) -> socket.socket:
        protocol = self.config.protocol
        host, port = self.config.addr
        target = f'{protocol} {host}:{port}'

        try:
            family, socktype = self.config.socket_params()
        except KeyError:
            raise RelayConnectionError(f'dial {target}: unknown protocol {protocol}') from None

        logger.debug(f'dialing {target}')
        # one deadline for the lookup and every address it yields
        deadline = time.monotonic() + self.CONNECT_TIMEOUT
        try:
            infos = socket.getaddrinfo(host, port, family, socktype)
        except OSError as e:
            raise RelayConnectionError(f'dial {target}: {e}') from e

        last_error = None
        for af, st, proto, _, sockaddr in infos:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise RelayConnectionError(f'dial {target}: timed out after {self.CONNECT_TIMEOUT}s') from last_error

            sock = socket.socket(af, st, proto)
            try:
                sock.settimeout(remaining)
                sock.connect(sockaddr)
            except OSError as e:
                last_error = e
                sock.close()
                continue

            sock.settimeout(self.TIMEOUT)
            logger.debug(f'connected to {target}')
            return sock

        raise RelayConnectionError(f'dial {target}: {last_error or "no addresses found"}') from last_error

    def close(self) -> None:
        if self.sock is not None:
            sock = self.sock
            self.sock = None
            sock.close()

    def send(self, command: str) -> str:
        if self.sock is None:
            raise WriteError(f'write {command!r}: connection is closed')

        logger.debug(f'>> {command}')
        try:
            self.sock.sendall(command.encode('ascii'))
        except (OSError, UnicodeEncodeError) as e:
            raise WriteError(f'write {command!r}: {e}') from e

        try:
            self.sock.settimeout(self.TIMEOUT)
            data = self.sock.recv(self.BUFFER_SIZE)
        except socket.timeout as e:
            raise ReadTimeoutError(f'read: no response to {command!r} within {self.TIMEOUT}s') from e
        except OSError as e:
            raise ReadError(f'read: {e}') from e

        if not data:
            raise ReadError('read: connection closed by peer')

        response = data.decode('ascii', errors='replace').strip()
        logger.debug(f'<< {response}')
        return response

    # relay methods
    # -------------

    def check_status(self) -> str:
        return self.send('00')

    def open_relay(self) -> None:
        self.send(f'2{self.relay}')

    def close_relay(self) -> None:
        self.send(f'1{self.relay}')

    def execute_action(self, action: Union[RelayAction, str]) -> str:
        action = RelayAction.parse(action)

        if action == RelayAction.STATUS:
            try:
                status = self.check_status()
            except (WriteError, ReadError) as e:
                raise ActionError(f'error checking status: {e}', action.value) from e
            message = f'Relay status: {status}'

        elif action == RelayAction.OPEN:
            try:
                self.open_relay()
            except (WriteError, ReadError) as e:
                raise ActionError(f'error opening relay {self.relay}: {e}', action.value, self.relay) from e
            message = f'Relay {self.relay} opened.'

        else:
            try:
                self.close_relay()
            except (WriteError, ReadError) as e:
                raise ActionError(f'error closing relay {self.relay}: {e}', action.value, self.relay) from e
            message = f'Relay {self.relay} closed.'

        logger.info(message)
        return message
