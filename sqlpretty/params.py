"""Query parameters, and substituting them for placeholders

Copyright (C) 2024 Alvin Zhang

This module is part of sqlpretty and is released under
the MIT License (see LICENSE)
"""

from dataclasses import dataclass
import logging

from . import sql_token as tok

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NamedParams:
    """(key, value) pairs, looked up by placeholder name"""
    values: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class IndexedParams:
    """Values looked up by position"""
    values: tuple[str, ...] = ()


QueryParams = NamedParams | IndexedParams | None


class Params:
    """Resolves placeholder tokens for one formatting run

    Bare `?` placeholders take the next value in order, so an instance
    must not be shared between queries.
    """

    def __init__(self, params: QueryParams):
        self.params = params
        self.index = 0

    def get(self, token: tok.Token) -> str:
        """Returns the text that replaces <token>

        Placeholders with no matching value are left as written.
        """
        value = self._lookup(token.key)
        if value is None:
            if self.params is not None:
                logger.debug('No value for placeholder %s', token.text)
            return token.text
        return value

    def _lookup(self, key: tok.PlaceholderKey | None) -> str | None:
        if isinstance(self.params, IndexedParams):
            if isinstance(key, tok.ZeroIndexedKey):
                if key.index is None:
                    position = self.index
                    self.index += 1
                else:
                    position = key.index
                return self._indexed(position)
            if isinstance(key, tok.OneIndexedKey):
                return self._indexed(key.index - 1)
            return None
        if isinstance(self.params, NamedParams):
            if isinstance(key, tok.NamedKey):
                name = key.name
            elif isinstance(key, (tok.ZeroIndexedKey, tok.OneIndexedKey)) and key.index is not None:
                name = str(key.index)
            else:
                return None
            # First pair with the name wins
            for param_key, value in self.params.values:
                if param_key == name:
                    return value
        return None

    def _indexed(self, position: int) -> str | None:
        values = self.params.values
        if 0 <= position < len(values):
            return values[position]
        return None


def to_query_params(value) -> QueryParams:
    """Accepts the shorthand forms for params

    A dict or a list of (key, value) pairs gives named params, a list of
    plain values gives indexed params. Values are converted with str().
    Raises TypeError for anything else.
    """
    if value is None or isinstance(value, (NamedParams, IndexedParams)):
        return value
    if isinstance(value, dict):
        return NamedParams(tuple((str(k), str(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        if value and all(isinstance(item, tuple) and len(item) == 2 for item in value):
            return NamedParams(tuple((str(k), str(v)) for k, v in value))
        if any(isinstance(item, tuple) for item in value):
            raise TypeError('Mix of (key, value) pairs and plain values in params')
        return IndexedParams(tuple(str(item) for item in value))
    raise TypeError(f'Unsupported params type: {type(value).__name__}')
