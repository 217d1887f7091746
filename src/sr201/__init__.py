import importlib

__all__ = ['RelayClient', 'RelayConfig', 'RelayAction', 'RelayEmulator']


def __getattr__(name):
    _map = {
        'RelayClient': '.client',
        'RelayConfig': '.types',
        'RelayAction': '.types',
        'RelayEmulator': '.emulator'
    }

    if name in __all__:
        module = importlib.import_module(_map[name], __name__)
        return getattr(module, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
