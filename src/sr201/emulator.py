import asyncio
import logging
import threading

from typing import List, Optional, Set

from .util import Addr


class RelayEmulator:
    """
    Emulates an SR201 board over TCP.

    Each read from a client is treated as one command. ``1<N>`` energizes
    channel N, ``2<N>`` releases it, and ``00`` only queries. Whatever the
    command, the board answers with its state string, one character per
    channel ('1' = energized). Malformed commands change nothing.
    """

    addr: Addr
    channels: List[bool]
    reply_delay: float
    received: List[str]

    def __init__(self,
                 addr: Addr,
                 channels: int = 8,
                 reply_delay: float = 0):
        self.addr = addr
        self.channels = [False] * channels
        self.reply_delay = reply_delay
        self.received = []

        self.logger = logging.getLogger(self.__class__.__name__)

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._server: Optional[asyncio.AbstractServer] = None
        self._thread: Optional[threading.Thread] = None
        self._listening = threading.Event()
        self._handlers: Set[asyncio.Task] = set()

    def state(self) -> str:
        return ''.join('1' if c else '0' for c in self.channels)

    def handle_command(self, command: str) -> str:
        self.received.append(command)

        if len(command) >= 2 and command[0] in ('1', '2') and command[1:].isdigit():
            channel = int(command[1:])
            if 1 <= channel <= len(self.channels):
                self.channels[channel-1] = command[0] == '1'
            else:
                self.logger.warning(f'no such channel: {channel}')
        elif command != '00':
            self.logger.warning(f'ignoring unknown command {command!r}')

        return self.state()

    async def client_handler(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        task = asyncio.current_task()
        self._handlers.add(task)
        self.logger.debug(f'client connected: {writer.get_extra_info("peername")}')

        try:
            while True:
                try:
                    request = await reader.read(255)
                except ConnectionError:
                    break
                if not request:
                    break

                command = request.decode('ascii', errors='replace').strip()
                self.logger.debug(f'<< {command}')
                response = self.handle_command(command)

                if self.reply_delay:
                    await asyncio.sleep(self.reply_delay)

                self.logger.debug(f'>> {response}')
                writer.write(response.encode('ascii'))
                try:
                    await writer.drain()
                except ConnectionError:
                    break
        finally:
            self._handlers.discard(task)
            writer.close()

    async def run_server(self):
        host, port = self.addr
        self._loop = asyncio.get_running_loop()
        self._server = await asyncio.start_server(self.client_handler, host, port)

        # port 0 means "any free port", remember the one we got
        self.addr = self._server.sockets[0].getsockname()[:2]
        self.logger.info(f'listening on {self.addr[0]}:{self.addr[1]}')
        self._listening.set()

        try:
            await self._server.serve_forever()
        except asyncio.CancelledError:
            self.logger.info('server stopped')

    async def _shutdown(self):
        for task in list(self._handlers):
            task.cancel()
        self._server.close()

    def run(self):
        asyncio.run(self.run_server())

    # background mode
    # ---------------

    def start(self, timeout: float = 5) -> Addr:
        self._thread = threading.Thread(target=self.run,
                                        name=self.__class__.__name__,
                                        daemon=True)
        self._thread.start()
        if not self._listening.wait(timeout):
            raise RuntimeError('emulator did not start listening in time')
        return self.addr

    def stop(self, timeout: float = 5):
        if self._loop is None or self._thread is None:
            return

        future = asyncio.run_coroutine_threadsafe(self._shutdown(), self._loop)
        future.result(timeout)
        self._thread.join(timeout)
        self._thread = None
        self._loop = None
        self._listening.clear()
