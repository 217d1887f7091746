from typing import Optional


class RelayError(Exception):
    pass


class RelayConnectionError(RelayError, ConnectionError):
    pass


class WriteError(RelayError):
    pass


class ReadError(RelayError):
    pass


class ReadTimeoutError(ReadError, TimeoutError):
    pass


class UnknownActionError(RelayError, ValueError):
    def __init__(self, action: str):
        super().__init__(f'unknown action: {action}')
        self.action = action


class ActionError(RelayError):
    def __init__(self,
                 message: str,
                 action: str,
                 relay: Optional[int] = None):
        super().__init__(message)
        self.action = action
        self.relay = relay
