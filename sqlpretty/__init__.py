"""Pretty prints SQL queries

Copyright (C) 2024 Alvin Zhang

This module is part of sqlpretty and is released under
the MIT License (see LICENSE)
"""

from .formatter import format_query
from .options import Dialect, FormatOptions, Indent
from .params import IndexedParams, NamedParams, QueryParams
from .sql_token import Token, TokenKind
from .tokenizer import tokenize

__version__ = '0.1.0'
__all__ = [
    'Dialect', 'FormatOptions', 'Indent', 'IndexedParams', 'NamedParams',
    'QueryParams', 'Token', 'TokenKind', 'format', 'tokenize',
]


def format(query: str, params=None, options: FormatOptions | None = None) -> str:
    """Format *query* according to *options*

    *params* (named or indexed, see FormatOptions.params for the accepted
    forms) replace the query's placeholders; when None, the params carried
    by *options* are used.
    """
    return format_query(query, params, options)
