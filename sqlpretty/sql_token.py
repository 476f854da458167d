"""All of the different kinds of tokens that can come out of tokenizer.py

Copyright (C) 2024 Alvin Zhang

This module is part of sqlpretty and is released under
the MIT License (see LICENSE)

Tokens fit into a few broad groups:
* layout-free tokens (whitespace, comments) that the formatter re-flows
* values (strings, words, numbers, placeholders)
* operators and punctuation
* parens, which includes CASE and END since they open and close a block
* reserved words, split by how they affect the layout

Concatenating the text of every token gives back the input exactly.
"""

from dataclasses import dataclass
from enum import StrEnum, auto


class TokenKind(StrEnum):
    """What the formatter needs to know about a piece of text"""

    WHITESPACE = auto()
    STRING = auto()
    WORD = auto()
    NUMBER = auto()
    OPERATOR = auto()
    TYPE_SPECIFIER = auto()
    OPEN_PAREN = auto()
    CLOSE_PAREN = auto()
    LINE_COMMENT = auto()
    BLOCK_COMMENT = auto()
    PLACEHOLDER = auto()

    # Reserved words, by layout behaviour
    RESERVED = auto()
    RESERVED_TOP_LEVEL = auto()
    RESERVED_TOP_LEVEL_NO_INDENT = auto()
    RESERVED_NEWLINE = auto()
    RESERVED_NEWLINE_AFTER = auto()
    JOIN = auto()


RESERVED_KINDS: frozenset[TokenKind] = frozenset({
    TokenKind.RESERVED,
    TokenKind.RESERVED_TOP_LEVEL,
    TokenKind.RESERVED_TOP_LEVEL_NO_INDENT,
    TokenKind.RESERVED_NEWLINE,
    TokenKind.RESERVED_NEWLINE_AFTER,
    TokenKind.JOIN,
})

# Tokens that open or close a clause
TOP_LEVEL_KINDS: frozenset[TokenKind] = frozenset({
    TokenKind.RESERVED_TOP_LEVEL,
    TokenKind.RESERVED_TOP_LEVEL_NO_INDENT,
})

COMMENT_KINDS: frozenset[TokenKind] = frozenset({
    TokenKind.LINE_COMMENT,
    TokenKind.BLOCK_COMMENT,
})


@dataclass(frozen=True)
class NamedKey:
    """`:name`, `@name`, `$name`, `{name}` and the quoted variants"""
    name: str


@dataclass(frozen=True)
class ZeroIndexedKey:
    """`?N`, or a bare `?` when index is None"""
    index: int | None = None


@dataclass(frozen=True)
class OneIndexedKey:
    """`$N`"""
    index: int


PlaceholderKey = NamedKey | ZeroIndexedKey | OneIndexedKey


@dataclass(frozen=True)
class Token:
    """A slice of the input

    <start> is the offset of <text> in the original string.
    <alias> is the canonical spelling used to compare keywords
    (e.g. `select distinct` has alias `SELECT`); for other tokens it is
    the text itself.
    """

    kind: TokenKind
    text: str
    start: int = 0
    alias: str = ''
    key: PlaceholderKey | None = None

    def __post_init__(self):
        if not self.alias:
            object.__setattr__(self, 'alias', self.text)

    @property
    def end(self) -> int:
        return self.start + len(self.text)

    def is_reserved(self) -> bool:
        return self.kind in RESERVED_KINDS

    def is_whitespace(self) -> bool:
        return self.kind == TokenKind.WHITESPACE

    def is_word_paren(self) -> bool:
        """CASE and END, which behave like parens"""
        return self.kind in (TokenKind.OPEN_PAREN, TokenKind.CLOSE_PAREN) and self.text[0].isalpha()

    def rendered_length(self) -> int:
        """Length the token takes up in formatted output

        Whitespace collapses to a single space and multi-word keywords
        are joined with single spaces.
        """
        if self.kind == TokenKind.WHITESPACE:
            return 1
        if self.kind in RESERVED_KINDS:
            return len(' '.join(self.text.split()))
        return len(self.text)
