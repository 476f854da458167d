"""Command line front end: formats files or stdin to stdout

Copyright (C) 2024 Alvin Zhang

This module is part of sqlpretty and is released under
the MIT License (see LICENSE)

Option defaults can come from the environment (or a .env file) as
SQLPRETTY_<OPTION>, e.g. SQLPRETTY_INDENT=4 or SQLPRETTY_DIALECT=postgresql.
"""

import argparse
import logging
import os
import sys

from dotenv import find_dotenv, load_dotenv

from .formatter import format_query
from .options import Dialect, FormatOptions, Indent
from .params import IndexedParams, NamedParams
from .tokenizer import tokenize

ENV_PREFIX = 'SQLPRETTY_'

ARGS = [
    {'name_or_args': ['files'], 'nargs': '*', 'help': 'SQL files to format, stdin when none are given'},
    {'name_or_args': ['--indent', '-i'], 'type': int, 'default': 2, 'help': 'Spaces per indentation level'},
    {'name_or_args': ['--tabs'], 'action': 'store_true', 'help': 'Indent with tabs'},
    {'name_or_args': ['--uppercase', '-u'], 'dest': 'uppercase', 'action': 'store_const', 'const': True,
     'help': 'Upper case keywords'},
    {'name_or_args': ['--lowercase', '-l'], 'dest': 'uppercase', 'action': 'store_const', 'const': False,
     'help': 'Lower case keywords'},
    {'name_or_args': ['--ignore-case-convert'], 'nargs': '*', 'default': [], 'metavar': 'WORD',
     'help': 'Keywords whose case is left alone'},
    {'name_or_args': ['--lines-between-queries'], 'type': int, 'default': 1, 'help': 'Line breaks after each ;'},
    {'name_or_args': ['--inline'], 'action': 'store_true', 'help': 'Put each query on one line'},
    {'name_or_args': ['--max-inline-block'], 'type': int, 'default': 50,
     'help': 'Longest parenthesized region kept on one line'},
    {'name_or_args': ['--max-inline-arguments'], 'type': int, 'help': 'Longest argument list kept on one line'},
    {'name_or_args': ['--max-inline-top-level'], 'type': int, 'help': 'Longest clause kept on its keyword line'},
    {'name_or_args': ['--joins-as-top-level'], 'action': 'store_true', 'help': 'Format joins like FROM or WHERE'},
    {'name_or_args': ['--dialect', '-d'], 'choices': [d.value for d in Dialect], 'default': Dialect.GENERIC.value,
     'help': 'SQL dialect'},
    {'name_or_args': ['--param', '-p'], 'action': 'append', 'default': [], 'metavar': 'KEY=VALUE',
     'help': 'Named parameter, can be repeated'},
    {'name_or_args': ['--positional'], 'action': 'append', 'default': [], 'metavar': 'VALUE',
     'help': 'Positional parameter, can be repeated'},
    {'name_or_args': ['--tokens'], 'action': 'store_true', 'help': 'Print the tokens instead of formatting'},
    {'name_or_args': ['--log-level'], 'type': str.upper, 'default': 'ERROR',
     'choices': ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], 'help': 'Logging level'},
]

# Environment values are strings, these need converting
ENV_CONVERTERS = {
    'indent': int,
    'lines_between_queries': int,
    'max_inline_block': int,
    'max_inline_arguments': int,
    'max_inline_top_level': int,
    'uppercase': lambda value: value.lower() in ('1', 'true', 'yes', 'on'),
    'tabs': lambda value: value.lower() in ('1', 'true', 'yes', 'on'),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='sqlpretty', description='Pretty print SQL queries')
    for arg in ARGS:
        arg = dict(arg)
        name_or_args = arg.pop('name_or_args')
        parser.add_argument(*name_or_args, **arg)
    return parser


def env_defaults() -> dict:
    """Defaults from SQLPRETTY_* environment variables

    Raises FormatOptions.InvalidOptionException for values that don't convert
    """
    defaults = {}
    for name, convert in ENV_CONVERTERS.items():
        variable = ENV_PREFIX + name.upper()
        value = os.environ.get(variable)
        if value:
            try:
                defaults[name] = convert(value)
            except ValueError:
                raise FormatOptions.InvalidOptionException(f'{variable}={value!r} is not valid') from None
    if dialect := os.environ.get(ENV_PREFIX + 'DIALECT'):
        defaults['dialect'] = dialect.lower()
    return defaults


def build_options(args: argparse.Namespace) -> FormatOptions:
    """Raises FormatOptions.InvalidOptionException for bad values"""
    if args.param and args.positional:
        raise FormatOptions.InvalidOptionException('--param and --positional cannot be mixed')
    params = None
    if args.param:
        pairs = []
        for item in args.param:
            key, sep, value = item.partition('=')
            if not sep:
                raise FormatOptions.InvalidOptionException(f'Expected KEY=VALUE, got {item!r}')
            pairs.append((key, value))
        params = NamedParams(tuple(pairs))
    elif args.positional:
        params = IndexedParams(tuple(args.positional))

    return FormatOptions(
        indent=Indent.tabs() if args.tabs else Indent.spaces(args.indent),
        uppercase=args.uppercase,
        ignore_case_convert=tuple(args.ignore_case_convert),
        lines_between_queries=args.lines_between_queries,
        inline=args.inline,
        max_inline_block=args.max_inline_block,
        max_inline_arguments=args.max_inline_arguments,
        max_inline_top_level=args.max_inline_top_level,
        joins_as_top_level=args.joins_as_top_level,
        dialect=args.dialect,
        params=params,
    )


def read_sources(files: list[str]) -> list[str]:
    if not files:
        return [sys.stdin.read()]
    sources = []
    for name in files:
        with open(name, 'r', encoding='utf-8') as f:
            sources.append(f.read())
    return sources


def dump_tokens(text: str, options: FormatOptions) -> str:
    lines = []
    for token in tokenize(text, options.dialect, isinstance(options.params, NamedParams)):
        lines.append(f'{token.kind.name}\t{token.text!r}')
    return '\n'.join(lines)


def main(argv: list[str] | None = None) -> int:
    load_dotenv(find_dotenv(usecwd=True))
    parser = build_parser()
    try:
        parser.set_defaults(**env_defaults())
        args = parser.parse_args(argv)

        logging.basicConfig(
            level=args.log_level,
            format='%(asctime)s - %(levelname)s - %(message)s',
            stream=sys.stderr,
        )

        options = build_options(args)
    except FormatOptions.InvalidOptionException as e:
        logging.error(f'Invalid option: {e}')
        return 1

    try:
        sources = read_sources(args.files)
    except (OSError, UnicodeDecodeError) as e:
        logging.error(f'Could not read input: {e}')
        return 1

    results = []
    for source in sources:
        if args.tokens:
            results.append(dump_tokens(source, options))
        else:
            results.append(format_query(source, options=options))
    print('\n\n'.join(results))
    return 0


if __name__ == '__main__':
    sys.exit(main())
