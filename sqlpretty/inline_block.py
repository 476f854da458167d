"""Decides whether a parenthesized region fits on one line

Copyright (C) 2024 Alvin Zhang

This module is part of sqlpretty and is released under
the MIT License (see LICENSE)
"""

from dataclasses import dataclass

from . import sql_token as tok
from .options import FormatOptions


@dataclass
class BlockInfo:
    length: int = 0
    has_forbidden_tokens: bool = False
    has_reserved_tokens: bool = False
    top_level_token_span: int = 0


class InlineBlock:
    """Tracks the inline block the formatter is currently inside

    <level> is 0 outside inline blocks. Parens nested in an inline block
    are inline too, so they only bump the level.
    """

    def __init__(self, options: FormatOptions):
        self.level = 0
        self.max_inline_block = options.max_inline_block
        self.max_inline_arguments = options.max_inline_arguments or 0
        self.max_inline_top_level = options.max_inline_top_level or 0

    def begin_if_possible(self, tokens: list[tok.Token], index: int):
        if self.level > 0:
            self.level += 1
        elif self.is_inline_block(tokens, index):
            self.level = 1

    def end(self):
        self.level -= 1

    def is_active(self) -> bool:
        return self.level > 0

    def is_inline_block(self, tokens: list[tok.Token], index: int) -> bool:
        """Whether the paren at <index> and its contents fit on one line"""
        info = self.build_info(tokens, index)
        return (
            not info.has_forbidden_tokens
            and info.length <= self.max_inline_block
            and info.top_level_token_span <= self.max_inline_top_level
            and (not info.has_reserved_tokens or info.length <= self.max_inline_arguments)
        )

    def build_info(self, tokens: list[tok.Token], index: int) -> BlockInfo:
        info = BlockInfo()
        level = 0
        # Start of the current pair of top-level keywords, -1 when none is open
        start_top_level = -1
        start_span = 0

        for token in tokens[index:]:
            info.length += token.rendered_length()
            kind = token.kind

            if kind in tok.TOP_LEVEL_KINDS:
                if start_top_level != -1 and start_top_level == level:
                    info.top_level_token_span = max(info.top_level_token_span, info.length - start_span)
                    start_top_level = -1
                else:
                    start_top_level = level
                    start_span = info.length
            elif kind == tok.TokenKind.RESERVED_NEWLINE:
                info.has_reserved_tokens = True
            elif kind in tok.COMMENT_KINDS or token.text == ';':
                info.has_forbidden_tokens = True
            elif kind == tok.TokenKind.OPEN_PAREN:
                level += 1
            elif kind == tok.TokenKind.CLOSE_PAREN:
                level -= 1

            if level == 0 or info.length > self.max_inline_block:
                break

        return info
