"""Formatting options

Copyright (C) 2024 Alvin Zhang

This module is part of sqlpretty and is released under
the MIT License (see LICENSE)
"""

from dataclasses import dataclass, field, replace
from enum import StrEnum, auto

from .params import QueryParams, to_query_params


class Dialect(StrEnum):
    """Decides how `[`, `]` and `@` are lexed"""

    GENERIC = auto()
    POSTGRESQL = auto()
    SQLSERVER = auto()


@dataclass(frozen=True)
class Indent:
    """One level of indentation: <width> spaces, or a tab"""

    width: int = 2
    use_tabs: bool = False

    @classmethod
    def spaces(cls, width: int) -> 'Indent':
        return cls(width=width)

    @classmethod
    def tabs(cls) -> 'Indent':
        return cls(use_tabs=True)

    def unit(self) -> str:
        return '\t' if self.use_tabs else ' ' * self.width


@dataclass(frozen=True)
class FormatOptions:
    """Everything that changes the output of format()

    <uppercase> is None to leave keywords as written, True or False to
    force upper or lower case. The max_inline_* limits are character
    counts; None for arguments and top level means always break.
    """

    class InvalidOptionException(ValueError):
        pass

    indent: Indent = field(default_factory=Indent)
    uppercase: bool | None = None
    ignore_case_convert: tuple[str, ...] = ()
    lines_between_queries: int = 1
    inline: bool = False
    max_inline_block: int = 50
    max_inline_arguments: int | None = None
    max_inline_top_level: int | None = None
    joins_as_top_level: bool = False
    dialect: Dialect = Dialect.GENERIC
    params: QueryParams = None

    def __post_init__(self):
        # Frozen, so conversions go through object.__setattr__
        if isinstance(self.indent, int) and not isinstance(self.indent, bool):
            object.__setattr__(self, 'indent', Indent.spaces(self.indent))
        if not isinstance(self.indent, Indent):
            raise self.InvalidOptionException(f'indent must be an Indent or an int, got {self.indent!r}')
        if self.indent.width < 0:
            raise self.InvalidOptionException(f'indent width must not be negative, got {self.indent.width}')

        if isinstance(self.ignore_case_convert, str):
            raise self.InvalidOptionException('ignore_case_convert must be a list of words, not a string')
        object.__setattr__(self, 'ignore_case_convert', tuple(self.ignore_case_convert))

        try:
            object.__setattr__(self, 'dialect', Dialect(self.dialect))
        except ValueError:
            raise self.InvalidOptionException(f'Unknown dialect: {self.dialect!r}') from None

        try:
            object.__setattr__(self, 'params', to_query_params(self.params))
        except TypeError as e:
            raise self.InvalidOptionException(str(e)) from e

        for name in ('lines_between_queries', 'max_inline_block'):
            if getattr(self, name) < 0:
                raise self.InvalidOptionException(f'{name} must not be negative')
        for name in ('max_inline_arguments', 'max_inline_top_level'):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise self.InvalidOptionException(f'{name} must not be negative')

    def with_params(self, params) -> 'FormatOptions':
        """Returns a copy of the options carrying <params>"""
        return replace(self, params=params)

    def format(self, query: str) -> str:
        from .formatter import format_query
        return format_query(query, self.params, self)
