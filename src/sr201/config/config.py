import toml
import yaml
import logging
import os

from os.path import join, isdir, isfile
from typing import Optional, Any, MutableMapping
from argparse import ArgumentParser

from ..util import Addr, parse_addr

_formats = ['toml', 'yaml']


def _get_config_path(name: str) -> Optional[str]:
    dirname = join(os.path.expanduser('~'), '.config', name)

    if isdir(dirname):
        for fmt in _formats:
            filename = join(dirname, f'config.{fmt}')
            if isfile(filename):
                return filename

        raise IOError(f'config not found in {dirname}')

    else:
        filenames = [join(os.path.expanduser('~'), '.config', f'{name}.{fmt}') for fmt in _formats]
        for file in filenames:
            if isfile(file):
                return file

    return None


def _read_config(path: str) -> MutableMapping[str, Any]:
    if not isfile(path):
        raise IOError(f'config not found: {path}')

    if path.endswith('.toml'):
        return toml.load(path)

    elif path.endswith(('.yaml', '.yml')):
        with open(path, 'r') as fd:
            return yaml.safe_load(fd) or {}

    raise IOError(f'unsupported config format: {path}')


class ConfigStore:
    data: MutableMapping[str, Any]
    app_name: Optional[str]

    def __init__(self):
        self.data = {}
        self.app_name = None

    def load(self, name: Optional[str] = None,
             use_cli=True,
             parser: ArgumentParser = None,
             args=None):
        self.app_name = name

        if (name is None) and (not use_cli):
            raise RuntimeError('either config name must be set or use_cli must be True')

        log_default_fmt = False
        log_file = None
        log_verbose = False

        path = None
        parsed = None
        if use_cli:
            if parser is None:
                parser = ArgumentParser()
            parser.add_argument('-c', '--config', type=str, required=name is None,
                                help='Path to the config in TOML or YAML format')
            parser.add_argument('-V', '--verbose', action='store_true')
            parser.add_argument('--log-file', type=str)
            parser.add_argument('--log-default-fmt', action='store_true')
            parsed = parser.parse_args(args)

            if parsed.config:
                path = parsed.config

            if parsed.verbose:
                log_verbose = True
            if parsed.log_file:
                log_file = parsed.log_file
            if parsed.log_default_fmt:
                log_default_fmt = parsed.log_default_fmt

        if path is None:
            path = _get_config_path(name)

        self.data = _read_config(path) if path is not None else {}

        if 'logging' in self:
            if not log_file and 'file' in self['logging']:
                log_file = self['logging']['file']
            if not log_default_fmt and 'default_fmt' in self['logging']:
                log_default_fmt = self['logging']['default_fmt']

        setup_logging(log_verbose, log_file, log_default_fmt)

        if use_cli:
            return parsed

    def get(self, key: str, default=None):
        cur = self.data
        for part in key.split('.'):
            if not isinstance(cur, dict) or part not in cur:
                return default
            cur = cur[part]
        return cur

    def get_addr(self, key: str) -> Addr:
        value = self.get(key)
        if value is None:
            raise KeyError(f'{key} not found in config')
        return parse_addr(value)

    def __getitem__(self, key):
        return self.data[key]

    def __setitem__(self, key, value):
        raise NotImplementedError('overwriting config values is prohibited')

    def __contains__(self, key):
        return key in self.data

    def items(self):
        return self.data.items()


config = ConfigStore()


def is_development_mode() -> bool:
    return config.get('logging.verbose') is True


def setup_logging(verbose=False, log_file=None, default_fmt=False):
    logging_level = logging.INFO
    if is_development_mode() or verbose:
        logging_level = logging.DEBUG

    log_config = {'level': logging_level}
    if not default_fmt:
        log_config['format'] = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    if log_file is not None:
        log_config['filename'] = log_file
        log_config['encoding'] = 'utf-8'

    logging.basicConfig(**log_config)
