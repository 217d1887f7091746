import socket
import struct
import threading
import time

import pytest

from sr201.emulator import RelayEmulator
from sr201.types import RelayConfig


class Listener:
    """
    Single-connection TCP peer: records every chunk it reads and answers
    each one with a fixed reply, optionally after a delay. With reply=None
    it hangs up after the first read.
    """

    def __init__(self, reply=b'OK', delay=0.0):
        self.reply = reply
        self.delay = delay
        self.received = []
        self.connected = threading.Event()

        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(('127.0.0.1', 0))
        self.sock.listen(1)
        self.sock.settimeout(10)
        self.addr = self.sock.getsockname()

        self.thread = threading.Thread(target=self._serve, daemon=True)
        self.thread.start()

    def _serve(self):
        try:
            conn, _ = self.sock.accept()
        except OSError:
            return

        self.connected.set()
        with conn:
            while True:
                try:
                    data = conn.recv(4096)
                except OSError:
                    break
                if not data:
                    break
                self.received.append(data)
                if self.reply is None:
                    break
                if self.delay:
                    time.sleep(self.delay)
                try:
                    conn.sendall(self.reply)
                except OSError:
                    break

    def config(self, relay=1, protocol='tcp') -> RelayConfig:
        return RelayConfig(host=self.addr[0], port=self.addr[1], protocol=protocol, relay=relay)

    def close(self):
        self.sock.close()


@pytest.fixture
def listener_factory():
    listeners = []

    def make(**kwargs) -> Listener:
        listener = Listener(**kwargs)
        listeners.append(listener)
        return listener

    yield make

    for listener in listeners:
        listener.close()


@pytest.fixture
def listener(listener_factory):
    return listener_factory()


@pytest.fixture
def emulator():
    emu = RelayEmulator(addr=('127.0.0.1', 0))
    emu.start()
    yield emu
    emu.stop()


@pytest.fixture
def free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    home = tmp_path / 'home'
    home.mkdir()
    monkeypatch.setenv('HOME', str(home))
    return home


@pytest.fixture
def unresponsive_addr():
    """
    Address of a listener whose accept queue is full and never drained, so
    further connection attempts hang until the client gives up.
    """
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(('127.0.0.1', 0))
    server.listen(0)
    addr = server.getsockname()

    fillers = []
    for _ in range(16):
        s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        s.settimeout(0.2)
        fillers.append(s)
        try:
            s.connect(addr)
        except socket.timeout:
            break
    else:
        pytest.skip('could not fill the accept queue')

    yield addr

    for s in fillers:
        s.close()
    server.close()


@pytest.fixture
def resetting_listener():
    """
    Accepts one connection and immediately resets it (SO_LINGER with zero
    timeout). The `reset` event is set once the reset has been sent.
    """
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(('127.0.0.1', 0))
    server.listen(1)
    server.settimeout(10)
    reset = threading.Event()

    def serve():
        try:
            conn, _ = server.accept()
        except OSError:
            return
        conn.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack('ii', 1, 0))
        conn.close()
        reset.set()

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()

    yield server.getsockname(), reset

    server.close()
