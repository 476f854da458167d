"""The indentation stack the formatter pushes clauses and blocks onto

Copyright (C) 2024 Alvin Zhang

This module is part of sqlpretty and is released under
the MIT License (see LICENSE)
"""

from dataclasses import dataclass
from enum import StrEnum, auto

from .options import FormatOptions


class IndentType(StrEnum):
    """What pushed a frame"""

    TOP = auto()  # a top-level clause such as SELECT or FROM
    BLOCK = auto()  # a paren that didn't fit on one line
    FOLDED_BLOCK = auto()  # a clause kept on its keyword's line, no indent of its own


@dataclass
class SpanInfo:
    """Measurements of a clause body, taken when its keyword is reached

    <full_span> is the rendered length up to the next clause at the same
    depth, <arguments> the number of comma separated arguments and
    <blocks> the number of parens at the clause's own depth.
    """

    full_span: int = 0
    blocks: int = 0
    newline_after: bool = True
    arguments: int = 1


@dataclass
class Frame:
    kind: IndentType
    span: SpanInfo
    alias: str = ''

    def is_clause(self) -> bool:
        return self.kind != IndentType.BLOCK


class Indentation:
    def __init__(self, options: FormatOptions):
        self.options = options
        self.frames: list[Frame] = []

    def get_indent(self) -> str:
        if self.options.inline:
            return ''
        depth = sum(1 for frame in self.frames if frame.kind != IndentType.FOLDED_BLOCK)
        return self.options.indent.unit() * depth

    def increase_top_level(self, span: SpanInfo, alias: str = ''):
        self.frames.append(Frame(IndentType.TOP, span, alias))

    def increase_folded_block(self, span: SpanInfo, alias: str = ''):
        self.frames.append(Frame(IndentType.FOLDED_BLOCK, span, alias))

    def increase_block_level(self):
        self.frames.append(Frame(IndentType.BLOCK, SpanInfo()))

    def decrease_top_level(self):
        """Ends the current clause, if the innermost frame is one"""
        if self.frames and self.frames[-1].is_clause():
            self.frames.pop()

    def decrease_block_level(self):
        """Pops frames up to and including the innermost block"""
        while self.frames:
            if self.frames.pop().kind == IndentType.BLOCK:
                break

    def current_clause(self) -> Frame | None:
        """The clause governing the current position

        None when the innermost frame is a block, since the clause outside
        the block doesn't govern what is inside it.
        """
        if self.frames and self.frames[-1].is_clause():
            return self.frames[-1]
        return None

    def reset(self):
        self.frames = []
