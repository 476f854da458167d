"""Splits a query into tokens, so the formatter handles tokens instead of raw text

Copyright (C) 2024 Alvin Zhang

This module is part of sqlpretty and is released under
the MIT License (see LICENSE)

The tokenizer never fails: anything it doesn't recognize becomes a
one-character OPERATOR token, so joining the text of all tokens always
gives back the input.
"""

import logging
import re

from . import sql_token as tok
from .keywords import ALTER_TABLE_ACTIONS, is_word_char, match_keyword
from .options import Dialect

logger = logging.getLogger(__name__)

# Unterminated strings and comments run to the end of the text
single_quoted = re.compile(r"'(?:[^'\\]|\\.|\\\Z|'')*(?:'|\Z)", re.S)
double_quoted = re.compile(r'"(?:[^"\\]|\\.|\\\Z|"")*(?:"|\Z)', re.S)
backtick_quoted = re.compile(r'`(?:[^`]|``)*(?:`|\Z)', re.S)
bracket_quoted = re.compile(r'\[(?:[^\]]|\]\])*(?:\]|\Z)', re.S)
prefixed_string = re.compile(r"[nNeE]'(?:[^'\\]|\\.|\\\Z|'')*(?:'|\Z)", re.S)
hex_string = re.compile(r"[xX]'[^']*(?:'|\Z)")
number = re.compile(r'-?[0-9]+(?:\.[0-9]+)?(?:[eE][-+]?[0-9]+)?')
line_comment = re.compile(r'(?:--|#)[^\r\n]*')
block_comment = re.compile(r'/\*.*?(?:\*/|\Z)', re.S)
indexed_placeholder = re.compile(r'(?:\?([0-9]*)|\$([0-9]+))(?![a-zA-Z0-9._$])')
named_placeholder = re.compile(r'[a-zA-Z0-9._$]+')
braced_placeholder = re.compile(r'\{[^{}\s]+\}')

OPERATOR_CHARS = '!<>=|:-~*&@^?#/%'
MAX_OPERATOR_LENGTH = 5

# `::` and `[]` only make sense after one of these
TYPE_SPECIFIER_FOLLOWS = frozenset({
    tok.TokenKind.CLOSE_PAREN,
    tok.TokenKind.PLACEHOLDER,
    tok.TokenKind.RESERVED,
    tok.TokenKind.STRING,
    tok.TokenKind.TYPE_SPECIFIER,
    tok.TokenKind.WORD,
})

# A `-` right after one of these is subtraction, not a sign
VALUE_KINDS = frozenset({
    tok.TokenKind.WORD,
    tok.TokenKind.NUMBER,
    tok.TokenKind.STRING,
    tok.TokenKind.CLOSE_PAREN,
    tok.TokenKind.PLACEHOLDER,
    tok.TokenKind.TYPE_SPECIFIER,
})


class Tokenizer:
    """Given a string, starts spitting out tokens

    Keywords depend on what came before them (SET after UPDATE, AND after
    BETWEEN, EXCEPT inside SELECT), so the tokenizer remembers the last
    significant token, the last top-level keyword and the last reserved word.
    <named_placeholders> decides whether `:1` style text is tried as a
    named placeholder before an indexed one.
    """

    def __init__(self, text: str, dialect: Dialect = Dialect.GENERIC, named_placeholders: bool = False):
        self.text = text
        self.dialect = Dialect(dialect)
        self.named_placeholders = named_placeholders
        self.position = 0
        self.previous: tok.Token | None = None
        self.previous_significant: tok.Token | None = None
        self.previous_top_level: tok.Token | None = None
        self.previous_reserved: tok.Token | None = None

    def __iter__(self):
        while (token := self.consume()) is not None:
            yield token

    def consume(self) -> tok.Token | None:
        """Return the next token, or None at the end of the text"""
        if self.position >= len(self.text):
            return None
        token = self._search_next(self.position)
        self.position = token.end
        self._remember(token)
        return token

    def _remember(self, token: tok.Token):
        self.previous = token
        if token.kind == tok.TokenKind.WHITESPACE or token.kind in tok.COMMENT_KINDS:
            return
        self.previous_significant = token
        if token.is_reserved():
            self.previous_reserved = token
        if token.kind in tok.TOP_LEVEL_KINDS or token.kind == tok.TokenKind.RESERVED_NEWLINE_AFTER:
            self.previous_top_level = token
        elif token.text == ';':
            self.previous_top_level = None

    def _search_next(self, position: int) -> tok.Token:
        """Return the token starting at <position>

        Reads self.text and the remembered context, changes nothing.
        """
        text = self.text
        char = text[position]

        if char.isspace():
            end = position + 1
            while end < len(text) and text[end].isspace():
                end += 1
            return tok.Token(tok.TokenKind.WHITESPACE, text[position:end], position)

        # Comments
        m = line_comment.match(text, position) or block_comment.match(text, position)
        if m:
            kind = tok.TokenKind.LINE_COMMENT if char in '-#' else tok.TokenKind.BLOCK_COMMENT
            return tok.Token(kind, m.group(), position)

        token = self._type_specifier(position)
        if token:
            return token

        token = self._string(position)
        if token:
            return token

        token = self._paren(position)
        if token:
            return token

        m = number.match(text, position)
        if m and not (m.end() < len(text) and is_word_char(text[m.end()])):
            previous = self.previous_significant
            negative_allowed = previous is None or previous.kind not in VALUE_KINDS
            if char != '-' or negative_allowed:
                return tok.Token(tok.TokenKind.NUMBER, m.group(), position)

        token = self._reserved(position)
        if token:
            return token

        end = self._operator_run_end(position)
        if end - position > 1:
            return tok.Token(tok.TokenKind.OPERATOR, text[position:end], position)

        token = self._placeholder(position)
        if token:
            return token

        end = position
        while end < len(text) and is_word_char(text[end]):
            end += 1
        if end > position:
            return tok.Token(tok.TokenKind.WORD, text[position:end], position)

        return tok.Token(tok.TokenKind.OPERATOR, char, position)

    def _type_specifier(self, position: int) -> tok.Token | None:
        previous = self.previous_significant
        if previous is None or previous.kind not in TYPE_SPECIFIER_FOLLOWS:
            return None
        if self.text.startswith('::', position):
            return tok.Token(tok.TokenKind.TYPE_SPECIFIER, '::', position)
        if self.dialect == Dialect.POSTGRESQL and self.text.startswith('[]', position):
            return tok.Token(tok.TokenKind.TYPE_SPECIFIER, '[]', position)
        return None

    def _string(self, position: int) -> tok.Token | None:
        patterns = [backtick_quoted, double_quoted, single_quoted, prefixed_string, hex_string]
        if self.dialect == Dialect.SQLSERVER:
            patterns.insert(1, bracket_quoted)
        for pattern in patterns:
            m = pattern.match(self.text, position)
            if m:
                return tok.Token(tok.TokenKind.STRING, m.group(), position)
        return None

    def _paren(self, position: int) -> tok.Token | None:
        char = self.text[position]
        if char == '(' or (char == '[' and self.dialect == Dialect.POSTGRESQL):
            return tok.Token(tok.TokenKind.OPEN_PAREN, char, position)
        if char == ')' or (char == ']' and self.dialect == Dialect.POSTGRESQL):
            return tok.Token(tok.TokenKind.CLOSE_PAREN, char, position)
        for word, kind in (('CASE', tok.TokenKind.OPEN_PAREN), ('END', tok.TokenKind.CLOSE_PAREN)):
            end = position + len(word)
            if self.text[position:end].upper() == word and not (end < len(self.text) and is_word_char(self.text[end])):
                if self.previous is not None and self.previous.text == '.':
                    return None
                return tok.Token(kind, self.text[position:end], position, alias=word)
        return None

    def _reserved(self, position: int) -> tok.Token | None:
        if self.text.startswith('$$', position):
            return tok.Token(tok.TokenKind.RESERVED_TOP_LEVEL_NO_INDENT, '$$', position)
        # `table.from` is a column, not a keyword
        if self.previous is not None and self.previous.text == '.':
            return None
        match = match_keyword(self.text, position, self.dialect)
        if match is None:
            return None
        keyword, end = match
        kind = self._contextual_kind(keyword)
        return tok.Token(kind, self.text[position:end], position, alias=keyword.alias)

    def _contextual_kind(self, keyword) -> tok.TokenKind:
        top_level = self.previous_top_level.alias if self.previous_top_level else None
        reserved = self.previous_reserved.alias if self.previous_reserved else None
        phrase = ' '.join(keyword.words)
        if keyword.alias == 'EXCEPT' and top_level == 'SELECT':
            # SELECT * EXCEPT (col) in BigQuery
            return tok.TokenKind.RESERVED
        if phrase == 'SET' and top_level == 'UPDATE':
            return tok.TokenKind.RESERVED_NEWLINE_AFTER
        if top_level == 'ALTER TABLE' and keyword.words[0] in ALTER_TABLE_ACTIONS and keyword.alias != 'ALTER TABLE':
            return tok.TokenKind.RESERVED_NEWLINE
        if phrase == 'AND' and reserved == 'BETWEEN':
            return tok.TokenKind.RESERVED
        return keyword.kind

    def _operator_run_end(self, position: int) -> int:
        """End of the run of operator characters starting at <position>

        The run stops before a comment, and a trailing character that
        belongs to what follows (`=?`, `=:name`, `=-1`) is left out.
        """
        text = self.text
        end = position
        while end < len(text) and end - position < MAX_OPERATOR_LENGTH and text[end] in OPERATOR_CHARS:
            if end > position and text.startswith(('--', '/*'), end):
                break
            end += 1
        if end - position > 1:
            last, following = text[end - 1], text[end:end + 1]
            if last == '?' and not (following and following in OPERATOR_CHARS):
                # `id=?` compares with a placeholder, `?|` stays an operator
                end -= 1
            elif following and last in ':@$' and (following.isalnum() or following in '\'"`[_'):
                end -= 1
            elif following and last == '-' and following.isdigit():
                end -= 1
        return end

    def _placeholder(self, position: int) -> tok.Token | None:
        finders = [self._named_placeholder, self._braced_placeholder, self._indexed_placeholder]
        if not self.named_placeholders:
            finders = [self._indexed_placeholder, self._named_placeholder, self._braced_placeholder]
        for finder in finders:
            token = finder(position)
            if token:
                return token
        return None

    def _indexed_placeholder(self, position: int) -> tok.Token | None:
        m = indexed_placeholder.match(self.text, position)
        if m is None:
            return None
        question, dollar = m.groups()
        if dollar is not None:
            key = tok.OneIndexedKey(int(dollar))
        else:
            key = tok.ZeroIndexedKey(int(question) if question else None)
        return tok.Token(tok.TokenKind.PLACEHOLDER, m.group(), position, key=key)

    def _named_placeholder(self, position: int) -> tok.Token | None:
        text = self.text
        prefixes = ':$@' if self.dialect == Dialect.SQLSERVER else ':$'
        if text[position] not in prefixes or position + 1 >= len(text):
            return None
        start = position + 1

        m = named_placeholder.match(text, start)
        if m:
            return tok.Token(tok.TokenKind.PLACEHOLDER, text[position:m.end()], position, key=tok.NamedKey(m.group()))

        quoted = [single_quoted, double_quoted, backtick_quoted]
        if self.dialect == Dialect.SQLSERVER:
            quoted.append(bracket_quoted)
        for pattern in quoted:
            m = pattern.match(text, start)
            if m:
                body = m.group()
                close = ']' if body[0] == '[' else body[0]
                terminated = len(body) > 1 and body.endswith(close)
                name = body[1:-1] if terminated else body[1:]
                name = name.replace('\\' + close, close)
                return tok.Token(tok.TokenKind.PLACEHOLDER, text[position:m.end()], position, key=tok.NamedKey(name))
        return None

    def _braced_placeholder(self, position: int) -> tok.Token | None:
        m = braced_placeholder.match(self.text, position)
        if m is None:
            return None
        return tok.Token(tok.TokenKind.PLACEHOLDER, m.group(), position, key=tok.NamedKey(m.group()[1:-1]))


def tokenize(text: str, dialect: Dialect = Dialect.GENERIC, named_placeholders: bool = False) -> list[tok.Token]:
    """Splits <text> into tokens; joining their text gives back <text>"""
    tokens = list(Tokenizer(text, dialect, named_placeholders))
    logger.debug('Tokenized %d characters into %d tokens', len(text), len(tokens))
    return tokens
