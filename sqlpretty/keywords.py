"""Keyword tables, and matching the longest keyword phrase at a position

Copyright (C) 2024 Alvin Zhang

This module is part of sqlpretty and is released under
the MIT License (see LICENSE)

Keywords may span several words (`LEFT OUTER JOIN`, `IS NOT DISTINCT FROM`).
Any run of whitespace can sit between the words. The tables are indexed by
the first word, and each bucket is sorted longest phrase first, so the first
phrase that matches is the longest one.
"""

from dataclasses import dataclass
from itertools import product
import unicodedata

from .options import Dialect
from .sql_token import TokenKind


@dataclass(frozen=True)
class Keyword:
    words: tuple[str, ...]
    kind: TokenKind
    alias: str
    dialects: frozenset[Dialect] | None = None  # None means every dialect


def is_word_char(char: str) -> bool:
    """Letters, digits, underscore, combining marks and joiners"""
    if char.isalnum() or char == '_':
        return True
    if char in '\u200c\u200d':
        return True
    # Combining marks and connector punctuation
    return unicodedata.category(char) in ('Mn', 'Mc', 'Me', 'Pc')


TOP_LEVEL = [
    ('SELECT', 'SELECT'),
    ('SELECT DISTINCT', 'SELECT'),
    ('SELECT ALL', 'SELECT'),
    ('FROM', 'FROM'),
    ('WHERE', 'WHERE'),
    ('GROUP BY', 'GROUP BY'),
    ('HAVING', 'HAVING'),
    ('ORDER BY', 'ORDER BY'),
    ('LIMIT', 'LIMIT'),
    ('INSERT', 'INSERT'),
    ('INSERT INTO', 'INSERT'),
    ('UPDATE', 'UPDATE'),
    ('VALUES', 'VALUES'),
    ('SET', 'SET'),
    ('SET SCHEMA', 'SET SCHEMA'),
    ('SET CURRENT SCHEMA', 'SET SCHEMA'),
    ('DELETE FROM', 'DELETE'),
    ('USING', 'USING'),
    ('ALTER TABLE', 'ALTER TABLE'),
    ('ALTER COLUMN', 'ALTER COLUMN'),
    ('ADD', 'ADD'),
    ('AFTER', 'AFTER'),
    ('MODIFY', 'MODIFY'),
    ('FETCH FIRST', 'FETCH FIRST'),
    ('EXCEPT', 'EXCEPT'),
    ('EXCEPT ALL', 'EXCEPT'),
    ('ON CONFLICT', 'ON CONFLICT'),
    ('RETURNING', 'RETURNING'),
    ('PARTITION BY', 'PARTITION BY'),
    ('WINDOW', 'WINDOW'),
    ('GO', 'GO'),
    ('FOR UPDATE', 'FOR UPDATE'),
    ('DROP TABLE', 'DROP'),
    ('DROP TABLE IF EXISTS', 'DROP'),
    ('DROP INDEX', 'DROP'),
    ('DROP INDEX IF EXISTS', 'DROP'),
    ('DROP VIEW', 'DROP'),
    ('DROP VIEW IF EXISTS', 'DROP'),
]

TOP_LEVEL_NO_INDENT = [
    ('UNION', 'UNION'),
    ('UNION ALL', 'UNION'),
    ('INTERSECT', 'INTERSECT'),
    ('INTERSECT ALL', 'INTERSECT'),
    ('MINUS', 'MINUS'),
    ('BEGIN', 'BEGIN'),
    ('DECLARE', 'DECLARE'),
    ('WITH', 'WITH'),
    ('WITH RECURSIVE', 'WITH'),
]

NEWLINE = [
    ('AND', 'AND'),
    ('OR', 'OR'),
    ('XOR', 'XOR'),
    ('WHEN', 'WHEN'),
    ('ELSE', 'ELSE'),
    ('CROSS APPLY', 'APPLY'),
    ('OUTER APPLY', 'APPLY'),
]

NEWLINE_AFTER = [
    ('DO NOTHING', 'DO NOTHING'),
    ('DO UPDATE SET', 'DO UPDATE SET'),
]

# Plain reserved words. Function names (COUNT, COALESCE, CHAR, ...) are
# left out on purpose: a reserved word keeps the space before its `(`.
RESERVED = [
    'ACCESSIBLE', 'ACTION', 'AGAINST', 'AGGREGATE', 'ALGORITHM', 'ALL', 'ALTER',
    'ANALYSE', 'ANALYZE', 'ANY', 'AS', 'ASC', 'AUTOCOMMIT', 'AUTO_INCREMENT',
    'BACKUP', 'BETWEEN', 'BINLOG', 'BOTH', 'BY', 'CASCADE', 'CHANGE', 'CHANGED',
    'CHARSET', 'CHECK', 'CHECKSUM', 'COLLATE', 'COLLATION', 'COLUMN', 'COLUMNS',
    'COMMENT', 'COMMIT', 'COMMITTED', 'COMPRESSED', 'CONCURRENT', 'CONSTRAINT',
    'CREATE', 'CROSS', 'CURRENT_TIMESTAMP', 'DATABASE', 'DATABASES',
    'DAY_HOUR', 'DAY_MINUTE', 'DAY_SECOND', 'DEFAULT', 'DEFINER', 'DELAYED',
    'DELETE', 'DESC', 'DESCRIBE', 'DETERMINISTIC', 'DISABLE', 'DISTINCT',
    'DISTINCTROW', 'DIV', 'DO', 'DROP', 'DUMPFILE', 'DUPLICATE', 'DYNAMIC',
    'ENABLE', 'ENCLOSED', 'ENGINE', 'ENGINES', 'ENGINE_TYPE', 'ESCAPE',
    'ESCAPED', 'EVENTS', 'EXEC', 'EXECUTE', 'EXISTS', 'EXPLAIN', 'EXTENDED',
    'FETCH', 'FIELDS', 'FIRST', 'FLUSH', 'FOR', 'FORCE',
    'FOREIGN', 'FULL', 'FULLTEXT', 'FUNCTION', 'GLOBAL', 'GRANT', 'GRANTS',
    'GROUP_CONCAT', 'HIGH_PRIORITY', 'HOUR_MINUTE',
    'HOUR_SECOND', 'IDENTIFIED', 'IF', 'IGNORE', 'ILIKE', 'IN', 'INDEX',
    'INDEXES', 'INFILE', 'INHERIT', 'INNER', 'INSERT_ID', 'INSERT_METHOD',
    'INTERVAL', 'INTO', 'INVOKER', 'IS', 'ISOLATION', 'KEY', 'KEYS', 'KILL',
    'LAST_INSERT_ID', 'LEADING', 'LIKE', 'LINEAR', 'LINES', 'LOAD',
    'LOCAL', 'LOCK', 'LOCKED', 'LOCKS', 'LOW_PRIORITY',
    'MASTER', 'MASTER_CONNECT_RETRY', 'MASTER_HOST', 'MASTER_LOG_FILE',
    'MATCH', 'MAX_CONNECTIONS_PER_HOUR', 'MAX_QUERIES_PER_HOUR',
    'MAX_ROWS', 'MAX_UPDATES_PER_HOUR', 'MAX_USER_CONNECTIONS',
    'MERGE', 'MINUTE_SECOND', 'MIN_ROWS', 'MRG_MYISAM',
    'MYISAM', 'NAMES', 'NATURAL', 'NOT', 'NULL', 'OF', 'OFFSET', 'ON', 'ONLY',
    'OPEN', 'OPTIMIZE', 'OPTION', 'OPTIONALLY', 'OUTER', 'OUTFILE', 'OVER',
    'PACK_KEYS', 'PARTIAL', 'PARTITION', 'PARTITIONS',
    'PRIMARY', 'PRIVILEGES', 'PROCEDURE', 'PROCESSLIST', 'PURGE',
    'RAID0', 'RAID_CHUNKS', 'RAID_CHUNKSIZE', 'RAID_TYPE', 'RANGE',
    'READ', 'READ_ONLY', 'READ_WRITE', 'REFERENCES', 'REGEXP', 'RELOAD',
    'RENAME', 'REPAIR', 'REPEATABLE', 'REPLICATION', 'RESET', 'RESTORE',
    'RESTRICT', 'RETURN', 'RETURNS', 'REVOKE', 'RLIKE', 'ROLLBACK', 'ROW',
    'ROWS', 'ROW_FORMAT', 'SECURITY', 'SEPARATOR', 'SERIALIZABLE',
    'SESSION', 'SHARE', 'SHOW', 'SHUTDOWN', 'SKIP', 'SLAVE', 'SONAME', 'SOUNDS',
    'SQL', 'SQL_AUTO_IS_NULL', 'SQL_BIG_RESULT', 'SQL_BIG_SELECTS',
    'SQL_BIG_TABLES', 'SQL_BUFFER_RESULT', 'SQL_CACHE', 'SQL_CALC_FOUND_ROWS',
    'SQL_LOG_BIN', 'SQL_LOG_OFF', 'SQL_LOG_UPDATE', 'SQL_LOW_PRIORITY_UPDATES',
    'SQL_MAX_JOIN_SIZE', 'SQL_NO_CACHE', 'SQL_QUOTE_SHOW_CREATE',
    'SQL_SAFE_UPDATES', 'SQL_SELECT_LIMIT', 'SQL_SLAVE_SKIP_COUNTER',
    'SQL_SMALL_RESULT', 'SQL_WARNINGS', 'START', 'STARTING', 'STOP',
    'STORAGE', 'STRAIGHT_JOIN', 'STRING', 'TABLE', 'TABLES',
    'TEMPORARY', 'TERMINATED', 'THEN', 'TO', 'TRAILING', 'TRANSACTIONAL',
    'TRUE', 'FALSE', 'TRUNCATE', 'UNCOMMITTED', 'UNIQUE',
    'UNLOCK', 'UNSIGNED', 'USE', 'VALIDATE', 'VARIABLES', 'VIEW',
    'WHILE', 'WORK', 'WRITE', 'YEAR_MONTH',
]

# Phrases that are plain reserved words but have to win over a shorter
# top-level or newline keyword starting with the same word
RESERVED_PHRASES = [
    ('IS DISTINCT FROM', 'IS DISTINCT FROM'),
    ('IS NOT DISTINCT FROM', 'IS NOT DISTINCT FROM'),
    ('ON UPDATE', 'ON UPDATE'),
    ('ON DELETE', 'ON DELETE'),
]

# Under ALTER TABLE these start a new action on their own line
ALTER_TABLE_ACTIONS = frozenset({'ADD', 'DROP', 'ALTER', 'VALIDATE', 'ENABLE', 'DISABLE'})


def _join_phrases() -> list[str]:
    phrases = []
    for glob, natural, side, outer, strictness in product(
        ['', 'GLOBAL'],
        ['', 'NATURAL'],
        ['', 'INNER', 'LEFT', 'RIGHT', 'FULL', 'CROSS', 'PASTE'],
        ['', 'OUTER'],
        ['', 'ANY', 'ALL', 'SEMI', 'ANTI', 'ASOF'],
    ):
        words = [w for w in (glob, natural, side, outer, strictness) if w]
        phrases.append(' '.join(words + ['JOIN']))
    phrases += ['ARRAY JOIN', 'LEFT ARRAY JOIN']
    return phrases


def _create_table_phrases() -> list[tuple[str, frozenset[Dialect] | None]]:
    phrases = []
    for scope, temporary in product(['', 'UNLOGGED', 'GLOBAL', 'LOCAL'], ['', 'TEMPORARY', 'TEMP']):
        if scope == 'UNLOGGED' and temporary:
            continue
        words = [w for w in ('CREATE', scope, temporary, 'TABLE') if w]
        dialects = frozenset({Dialect.POSTGRESQL}) if scope == 'UNLOGGED' else None
        phrases.append((' '.join(words), dialects))
    return phrases


def _build_table() -> dict[str, list[Keyword]]:
    table: dict[str, list[Keyword]] = {}

    def add(phrase: str, kind: TokenKind, alias: str, dialects: frozenset[Dialect] | None = None):
        words = tuple(phrase.split())
        table.setdefault(words[0], []).append(Keyword(words, kind, alias, dialects))

    for phrase, alias in TOP_LEVEL:
        add(phrase, TokenKind.RESERVED_TOP_LEVEL, alias)
    for phrase, alias in TOP_LEVEL_NO_INDENT:
        add(phrase, TokenKind.RESERVED_TOP_LEVEL_NO_INDENT, alias)
    for phrase, alias in NEWLINE:
        add(phrase, TokenKind.RESERVED_NEWLINE, alias)
    for phrase, alias in NEWLINE_AFTER:
        add(phrase, TokenKind.RESERVED_NEWLINE_AFTER, alias)
    for phrase in _join_phrases():
        add(phrase, TokenKind.JOIN, 'JOIN')
    for phrase, dialects in _create_table_phrases():
        add(phrase, TokenKind.RESERVED, 'CREATE', dialects)
    for phrase, alias in RESERVED_PHRASES:
        add(phrase, TokenKind.RESERVED, alias)
    for word in RESERVED:
        if word not in table or all(len(k.words) > 1 for k in table[word]):
            add(word, TokenKind.RESERVED, word)

    for bucket in table.values():
        bucket.sort(key=lambda k: len(k.words), reverse=True)
    return table


# Built once at import, read-only afterwards
keyword_table: dict[str, list[Keyword]] = _build_table()


def _word_end(text: str, position: int) -> int:
    end = position
    while end < len(text) and is_word_char(text[end]):
        end += 1
    return end


def match_keyword(text: str, position: int, dialect: Dialect) -> tuple[Keyword, int] | None:
    """Finds the longest keyword phrase starting at <position>

    Returns the keyword and the end offset of the match, or None.
    Each word has to end on a word boundary, so `SELECTED` is not `SELECT`.
    """
    first_end = _word_end(text, position)
    if first_end == position:
        return None
    bucket = keyword_table.get(text[position:first_end].upper())
    if bucket is None:
        return None
    for keyword in bucket:
        if keyword.dialects is not None and dialect not in keyword.dialects:
            continue
        end = first_end
        for word in keyword.words[1:]:
            gap = end
            while gap < len(text) and text[gap].isspace():
                gap += 1
            if gap == end:
                break
            word_end = _word_end(text, gap)
            if text[gap:word_end].upper() != word:
                break
            end = word_end
        else:
            return keyword, end
    return None
