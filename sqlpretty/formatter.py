"""Produce the formatted query from its tokens

Copyright (C) 2024 Alvin Zhang

This module is part of sqlpretty and is released under
the MIT License (see LICENSE)

The formatter makes one pass over the tokens. Whitespace from the input is
dropped and re-created: each token decides whether it goes on a new line,
and the indentation stack decides how far in that line starts.
"""

import logging

from . import sql_token as tok
from .indentation import Indentation, SpanInfo
from .inline_block import InlineBlock
from .options import FormatOptions
from .params import NamedParams, Params, QueryParams, to_query_params
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


def _skip_space(text: str, position: int) -> int:
    while position < len(text) and text[position].isspace():
        position += 1
    return position


def fmt_switch(comment: str) -> bool | None:
    """Recognizes `-- fmt: off` and `-- fmt: on` directives

    Returns True for off, False for on and None for any other comment.
    Matches the same text as the regex (?i)^(--|/\\*)\\s*fmt\\s*:\\s*(off|on),
    walking the states by hand since it runs on every comment.
    """
    if not comment.startswith(('--', '/*')):
        return None
    position = _skip_space(comment, 2)
    if comment[position:position + 3].lower() != 'fmt':
        return None
    position = _skip_space(comment, position + 3)
    if comment[position:position + 1] != ':':
        return None
    position = _skip_space(comment, position + 1)
    if comment[position:position + 3].lower() == 'off':
        return True
    if comment[position:position + 2].lower() == 'on':
        return False
    return None


class Formatter:
    def __init__(self, tokens: list[tok.Token], params: Params, options: FormatOptions):
        self.tokens = tokens
        self.params = params
        self.options = options
        self.index = 0
        self.out: list[str] = []
        self.indentation = Indentation(options)
        self.inline_block = InlineBlock(options)
        self.ignore_case = {word.lower() for word in options.ignore_case_convert}

    def format(self) -> str:
        """Returns the formatted query"""
        formatting_off = False
        skip_whitespace = False
        for index, token in enumerate(self.tokens):
            self.index = index
            if skip_whitespace:
                skip_whitespace = False
                if token.is_whitespace():
                    continue

            if token.kind in tok.COMMENT_KINDS:
                switch = fmt_switch(token.text)
                if switch is not None:
                    logger.debug('Formatting %s at offset %d', 'off' if switch else 'on', token.start)
                    formatting_off = switch
                    skip_whitespace = True
                    continue

            if formatting_off:
                self._push(token.text)
            else:
                self._format_token(token)

        return ''.join(self.out).strip()

    def _format_token(self, token: tok.Token):
        kind = token.kind
        if kind == tok.TokenKind.WHITESPACE:
            return
        if kind == tok.TokenKind.LINE_COMMENT:
            self._format_line_comment(token)
        elif kind == tok.TokenKind.BLOCK_COMMENT:
            self._format_block_comment(token)
        elif kind == tok.TokenKind.RESERVED_TOP_LEVEL:
            self._format_top_level_reserved_word(token)
        elif kind == tok.TokenKind.RESERVED_TOP_LEVEL_NO_INDENT:
            self._format_top_level_reserved_word(token, no_indent=True)
        elif kind == tok.TokenKind.RESERVED_NEWLINE_AFTER:
            self._format_newline_after_reserved_word(token)
        elif kind == tok.TokenKind.RESERVED_NEWLINE:
            self._format_newline_reserved_word(token)
        elif kind == tok.TokenKind.JOIN:
            if self.options.joins_as_top_level:
                self._format_top_level_reserved_word(token)
            else:
                self._format_newline_reserved_word(token)
        elif kind == tok.TokenKind.RESERVED:
            self._format_with_spaces(self._keyword_text(token))
        elif kind == tok.TokenKind.OPEN_PAREN:
            self._format_opening_paren(token)
        elif kind == tok.TokenKind.CLOSE_PAREN:
            self._format_closing_paren(token)
        elif kind == tok.TokenKind.PLACEHOLDER:
            self._format_with_spaces(self.params.get(token))
        elif kind == tok.TokenKind.TYPE_SPECIFIER:
            self._trim_spaces_end()
            self._push(token.text)
            # `::` hugs the type after it, `[]` doesn't
            if token.text != '::':
                self._push(' ')
        elif token.text == ',':
            self._format_comma(token)
        elif token.text == ';':
            self._format_query_separator(token)
        elif token.text == ':':
            self._trim_spaces_end()
            self._push(': ')
        elif token.text == '.':
            self._trim_spaces_end()
            self._push('.')
        else:
            self._format_with_spaces(token.text)

    # Output buffer helpers

    def _push(self, text: str):
        if text:
            self.out.append(text)

    def _ends_with(self, char: str) -> bool:
        return bool(self.out) and self.out[-1].endswith(char)

    def _trim_spaces_end(self):
        """Removes trailing spaces and tabs, but not line breaks"""
        while self.out:
            trimmed = self.out[-1].rstrip(' \t')
            if trimmed:
                self.out[-1] = trimmed
                return
            self.out.pop()

    def _trim_whitespace_end(self):
        while self.out:
            trimmed = self.out[-1].rstrip()
            if trimmed:
                self.out[-1] = trimmed
                return
            self.out.pop()

    def _at_line_start(self) -> bool:
        for piece in reversed(self.out):
            trimmed = piece.rstrip(' \t')
            if trimmed:
                return trimmed.endswith('\n')
        return True

    def _add_new_line(self):
        self._trim_spaces_end()
        if self.options.inline:
            if self.out and not self._ends_with('\n'):
                self._push(' ')
            return
        if not self._ends_with('\n'):
            self._push('\n')
        self._push(self.indentation.get_indent())

    def _ensure_space(self):
        """One space before the next token, or the indent if on a new line"""
        self._trim_spaces_end()
        if self._ends_with('\n'):
            self._push(self.indentation.get_indent())
        elif self.out:
            self._push(' ')

    def _format_with_spaces(self, text: str):
        self._push(text)
        self._push(' ')

    def _token_at(self, index: int) -> tok.Token | None:
        if 0 <= index < len(self.tokens):
            return self.tokens[index]
        return None

    def _keyword_text(self, token: tok.Token) -> str:
        """Keyword with single spaces between words, in the configured case"""
        text = ' '.join(token.text.split())
        if self.options.uppercase is None or text.lower() in self.ignore_case:
            return text
        return text.upper() if self.options.uppercase else text.lower()

    # Clause measurements

    def _ends_clause(self, token: tok.Token) -> bool:
        kind = token.kind
        return (
            kind in tok.TOP_LEVEL_KINDS
            or kind == tok.TokenKind.RESERVED_NEWLINE_AFTER
            or (kind == tok.TokenKind.JOIN and self.options.joins_as_top_level)
        )

    def _is_newline_word(self, token: tok.Token) -> bool:
        return token.kind == tok.TokenKind.RESERVED_NEWLINE or (
            token.kind == tok.TokenKind.JOIN and not self.options.joins_as_top_level
        )

    def _clause_span(self) -> tuple[SpanInfo, bool, bool]:
        """Measures the body of the clause whose keyword is the current token

        Returns the span, whether the body should be folded around a single
        paren block (`FROM (` ... `) AS x`), and whether the body is empty.
        """
        span = SpanInfo()
        depth = 0
        first: int | None = None
        has_comments = False
        has_newline_words = False

        for index in range(self.index + 1, len(self.tokens)):
            token = self.tokens[index]
            kind = token.kind
            if token.text == ';' or (depth == 0 and self._ends_clause(token)):
                break
            if kind == tok.TokenKind.CLOSE_PAREN:
                if depth == 0:
                    break
                depth -= 1
            elif kind == tok.TokenKind.OPEN_PAREN:
                if depth == 0:
                    span.blocks += 1
                depth += 1
            elif depth == 0 and token.text == ',':
                span.arguments += 1
            elif depth == 0 and self._is_newline_word(token):
                has_newline_words = True

            if kind in tok.COMMENT_KINDS:
                has_comments = True
            if first is None and kind != tok.TokenKind.WHITESPACE:
                first = index
            span.full_span += token.rendered_length()

        empty = first is None
        fold_block = False
        limit = self.options.max_inline_top_level
        if empty:
            span.newline_after = False
        elif limit is not None and not has_comments:
            first_token = self.tokens[first]
            if (
                first_token.kind == tok.TokenKind.OPEN_PAREN
                and not first_token.is_word_paren()
                and span.blocks == 1
                and span.arguments == 1
                and not has_newline_words
                and not self.inline_block.is_inline_block(self.tokens, first)
            ):
                fold_block = True
                span.newline_after = False
            elif span.full_span <= limit:
                span.newline_after = False
        return span, fold_block, empty

    def _arguments_fit(self, clause) -> bool:
        limit = self.options.max_inline_arguments
        return clause is not None and limit is not None and clause.span.full_span <= limit

    # Token handlers

    def _format_top_level_reserved_word(self, token: tok.Token, no_indent: bool = False):
        text = self._keyword_text(token)
        if self.inline_block.is_active():
            self._format_with_spaces(text)
            return

        span, fold_block, _ = self._clause_span()
        self.indentation.decrease_top_level()
        self._add_new_line()
        if fold_block:
            self.indentation.increase_folded_block(span, token.alias)
        elif not no_indent:
            self.indentation.increase_top_level(span, token.alias)
        self._push(text)
        if span.newline_after:
            self._add_new_line()
        else:
            self._push(' ')

    def _format_newline_after_reserved_word(self, token: tok.Token):
        """SET after UPDATE, DO UPDATE SET: the break comes after the keyword"""
        text = self._keyword_text(token)
        if self.inline_block.is_active():
            self._format_with_spaces(text)
            return

        previous = self.indentation.current_clause()
        folded = previous is not None and not previous.span.newline_after
        span, _, empty = self._clause_span()
        span.newline_after = not empty
        self.indentation.decrease_top_level()
        if folded:
            self._ensure_space()
        else:
            self._add_new_line()
        self.indentation.increase_top_level(span, token.alias)
        self._push(text)
        if span.newline_after:
            self._add_new_line()
        else:
            self._push(' ')

    def _format_newline_reserved_word(self, token: tok.Token):
        text = self._keyword_text(token)
        if self.inline_block.is_active():
            self._format_with_spaces(text)
            return

        clause = self.indentation.current_clause()
        if clause is not None and clause.span.newline_after and self._arguments_fit(clause):
            self._ensure_space()
        else:
            self._add_new_line()
        self._format_with_spaces(text)

    def _format_opening_paren(self, token: tok.Token):
        previous = self._token_at(self.index - 1)
        if token.text == '[':
            # Subscripts hug what they index
            keep_space = previous is not None and previous.kind in (
                tok.TokenKind.OPEN_PAREN, tok.TokenKind.LINE_COMMENT)
        else:
            keep_space = previous is None or previous.is_reserved() or previous.kind in (
                tok.TokenKind.WHITESPACE, tok.TokenKind.OPEN_PAREN, tok.TokenKind.LINE_COMMENT)
        if not keep_space and not self._at_line_start():
            self._trim_spaces_end()

        self._push(self._keyword_text(token) if token.is_word_paren() else token.text)

        self.inline_block.begin_if_possible(self.tokens, self.index)
        if not self.inline_block.is_active():
            self.indentation.increase_block_level()
            self._add_new_line()
        elif token.is_word_paren():
            self._push(' ')

    def _format_closing_paren(self, token: tok.Token):
        text = self._keyword_text(token) if token.is_word_paren() else token.text
        if self.inline_block.is_active():
            self.inline_block.end()
            if token.is_word_paren():
                self._ensure_space()
            else:
                self._trim_spaces_end()
        else:
            self.indentation.decrease_block_level()
            self._add_new_line()
        self._format_with_spaces(text)

    def _format_comma(self, token: tok.Token):
        self._trim_spaces_end()
        self._format_with_spaces(token.text)
        if self.inline_block.is_active():
            return
        clause = self.indentation.current_clause()
        if clause is not None and clause.alias == 'LIMIT':
            return
        if self._arguments_fit(clause):
            return
        self._add_new_line()

    def _format_line_comment(self, token: tok.Token):
        previous = self._token_at(self.index - 1)
        following = self._token_at(self.index + 1)
        after_following = self._token_at(self.index + 2)
        two_back = self._token_at(self.index - 2)
        if (
            previous is not None
            and '\n' in previous.text
            and following is not None
            and following.is_whitespace()
            and after_following is not None
            and after_following.kind != tok.TokenKind.OPERATOR
        ):
            # The comment had a line of its own
            self._add_new_line()
        elif two_back is not None and two_back.text == ',':
            # Trailing comment on an argument stays on its line
            self._trim_whitespace_end()
            self._push('  ')
        self._push(token.text)
        if self.options.inline:
            self._push('\n')
        else:
            self._add_new_line()

    def _format_block_comment(self, token: tok.Token):
        self._add_new_line()
        self._push(self._indent_comment(token.text))
        self._add_new_line()

    def _indent_comment(self, text: str) -> str:
        indent = self.indentation.get_indent()
        lines = text.split('\n')
        rest = [indent + ' ' + line.lstrip(' \t') if line.strip() else '' for line in lines[1:]]
        return '\n'.join([lines[0]] + rest)

    def _format_query_separator(self, token: tok.Token):
        self.indentation.reset()
        self._trim_spaces_end()
        self._push(token.text)
        if self.options.inline:
            self._push(' ')
        else:
            self._push('\n' * self.options.lines_between_queries)


def format_query(query: str, params: QueryParams = None, options: FormatOptions | None = None) -> str:
    """Formats <query>, substituting <params> for its placeholders"""
    if options is None:
        options = FormatOptions()
    params = to_query_params(params)
    if params is None:
        params = options.params
    tokens = tokenize(query, options.dialect, isinstance(params, NamedParams))
    return Formatter(tokens, Params(params), options).format()
