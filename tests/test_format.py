from textwrap import dedent

import pytest

import sqlpretty
from sqlpretty import Dialect, FormatOptions, Indent


def fmt(query, **options):
    return sqlpretty.format(query, options=FormatOptions(**options))


# (label, input, expected) with default options
DEFAULT_CASES = [
    (
        'simple',
        'SELECT * FROM my_table WHERE id = 1',
        """\
        SELECT
          *
        FROM
          my_table
        WHERE
          id = 1""",
    ),
    (
        'clause breaking',
        'SELECT count(*),Column1 FROM Table1;',
        """\
        SELECT
          count(*),
          Column1
        FROM
          Table1;""",
    ),
    (
        'distinct and functions',
        "SELECT DISTINCT name, ROUND(age/7) field1, 18 + 20 AS field2, 'some string' FROM foo;",
        """\
        SELECT DISTINCT
          name,
          ROUND(age / 7) field1,
          18 + 20 AS field2,
          'some string'
        FROM
          foo;""",
    ),
    (
        'join with between',
        'SELECT t1.id, t1.name, t1.title, t1.description, t2.mothers_maiden_name, t2.first_girlfriend\n'
        'FROM my_table t1 LEFT JOIN other_table t2 ON t1.id = t2.other_id WHERE t2.order BETWEEN  17 AND 30',
        """\
        SELECT
          t1.id,
          t1.name,
          t1.title,
          t1.description,
          t2.mothers_maiden_name,
          t2.first_girlfriend
        FROM
          my_table t1
          LEFT JOIN other_table t2 ON t1.id = t2.other_id
        WHERE
          t2.order BETWEEN 17 AND 30""",
    ),
    (
        'subquery',
        'SELECT *, SUM(*) AS sum FROM (SELECT * FROM Posts LIMIT 30) WHERE a > b',
        """\
        SELECT
          *,
          SUM(*) AS sum
        FROM
          (
            SELECT
              *
            FROM
              Posts
            LIMIT
              30
          )
        WHERE
          a > b""",
    ),
    (
        'and or',
        'SELECT * FROM foo WHERE Column1 = 1 AND Column2 = 2 OR Column3 = 3',
        """\
        SELECT
          *
        FROM
          foo
        WHERE
          Column1 = 1
          AND Column2 = 2
          OR Column3 = 3""",
    ),
    (
        'insert',
        "INSERT INTO Customers (ID, MoneyBalance, Address, City) VALUES (12,-123.4, 'Skagen 2111','Stv');",
        """\
        INSERT INTO
          Customers (ID, MoneyBalance, Address, City)
        VALUES
          (12, -123.4, 'Skagen 2111', 'Stv');""",
    ),
    (
        'update',
        "UPDATE Customers SET ContactName='Alfred Schmidt', City='Hamburg' WHERE CustomerName='Alfreds Futterkiste';",
        """\
        UPDATE
          Customers
        SET
          ContactName = 'Alfred Schmidt',
          City = 'Hamburg'
        WHERE
          CustomerName = 'Alfreds Futterkiste';""",
    ),
    (
        'delete',
        "DELETE FROM Customers WHERE CustomerName='Alfred' AND Phone=5002132;",
        """\
        DELETE FROM
          Customers
        WHERE
          CustomerName = 'Alfred'
          AND Phone = 5002132;""",
    ),
    (
        'case',
        "SELECT CASE WHEN a = 1 THEN 'one' ELSE 'other' END AS x FROM t",
        """\
        SELECT
          CASE
            WHEN a = 1 THEN 'one'
            ELSE 'other'
          END AS x
        FROM
          t""",
    ),
    (
        'long lists break',
        'INSERT INTO some_table (id_product, id_shop, id_currency, id_country, id_registration) (\n'
        'SELECT IF(dq.id_discounter_shopping = 2, dq.value, dq.value / 100),\n'
        "IF (dq.id_discounter_shopping = 2, 'amount', 'percentage') FROM foo);",
        """\
        INSERT INTO
          some_table (
            id_product,
            id_shop,
            id_currency,
            id_country,
            id_registration
          ) (
            SELECT
              IF (
                dq.id_discounter_shopping = 2,
                dq.value,
                dq.value / 100
              ),
              IF (
                dq.id_discounter_shopping = 2,
                'amount',
                'percentage'
              )
            FROM
              foo
          );""",
    ),
    (
        'create table',
        'CREATE TABLE TEST(id NUMBER NOT NULL, col1 VARCHAR2(20), col2 VARCHAR2(20));',
        """\
        CREATE TABLE TEST(
          id NUMBER NOT NULL,
          col1 VARCHAR2(20),
          col2 VARCHAR2(20)
        );""",
    ),
    (
        'short create table',
        'CREATE TABLE items (a INT PRIMARY KEY, b TEXT);',
        'CREATE TABLE items (a INT PRIMARY KEY, b TEXT);',
    ),
    (
        'on update',
        'CREATE TABLE a (b integer REFERENCES c (id) ON                                     UPDATE RESTRICT, other integer);',
        """\
        CREATE TABLE a (
          b integer REFERENCES c (id) ON UPDATE RESTRICT,
          other integer
        );""",
    ),
    (
        'alter table',
        'ALTER TABLE supplier ALTER COLUMN supplier_name VARCHAR(100) NOT NULL;',
        """\
        ALTER TABLE
          supplier
          ALTER COLUMN supplier_name VARCHAR(100) NOT NULL;""",
    ),
    (
        'alter table modify',
        'ALTER TABLE supplier MODIFY supplier_name char(100) NOT NULL;',
        """\
        ALTER TABLE
          supplier
        MODIFY
          supplier_name char(100) NOT NULL;""",
    ),
    (
        'drop',
        '-- comment\nDROP TABLE IF EXISTS "public"."table_name";',
        """\
        -- comment
        DROP TABLE IF EXISTS
          "public"."table_name";""",
    ),
    (
        'set schema',
        'SET SCHEMA schema1; SET CURRENT SCHEMA schema2;',
        """\
        SET SCHEMA
          schema1;
        SET CURRENT SCHEMA
          schema2;""",
    ),
    (
        'limit with comma',
        'SELECT * FROM t LIMIT 5, 10;',
        """\
        SELECT
          *
        FROM
          t
        LIMIT
          5, 10;""",
    ),
    (
        'lowercase limit with comma',
        'select * from t limit 5, 10',
        """\
        select
          *
        from
          t
        limit
          5, 10""",
    ),
    (
        'limit with offset',
        'SELECT * FROM t LIMIT 5 OFFSET 8;',
        """\
        SELECT
          *
        FROM
          t
        LIMIT
          5 OFFSET 8;""",
    ),
    (
        'window',
        'SELECT id, val, at, SUM(val) OVER win AS cumulative FROM data WINDOW win AS (PARTITION BY id ORDER BY at);',
        """\
        SELECT
          id,
          val,
          at,
          SUM(val) OVER win AS cumulative
        FROM
          data
        WINDOW
          win AS (
            PARTITION BY
              id
            ORDER BY
              at
          );""",
    ),
    (
        'is distinct from',
        'SELECT a IS DISTINCT FROM b FROM t',
        """\
        SELECT
          a IS DISTINCT FROM b
        FROM
          t""",
    ),
    (
        'for update',
        'SELECT id FROM users WHERE disabled_at IS NULL FOR UPDATE OF users SKIP LOCKED LIMIT 1',
        """\
        SELECT
          id
        FROM
          users
        WHERE
          disabled_at IS NULL
        FOR UPDATE
          OF users SKIP LOCKED
        LIMIT
          1""",
    ),
    (
        'except on columns',
        'SELECT table_0.* EXCEPT (profit), details.* EXCEPT (item_id), table_0.profit FROM table_0',
        """\
        SELECT
          table_0.* EXCEPT (profit),
          details.* EXCEPT (item_id),
          table_0.profit
        FROM
          table_0""",
    ),
    (
        'union',
        'SELECT a FROM t UNION ALL SELECT b FROM u',
        """\
        SELECT
          a
        FROM
          t
        UNION ALL
        SELECT
          b
        FROM
          u""",
    ),
    (
        'go',
        'SELECT 1 GO SELECT 2',
        """\
        SELECT
          1
        GO
        SELECT
          2""",
    ),
    (
        'non standard join',
        'SELECT * FROM t1 GLOBAL ANY JOIN t2 ON t1.id = t2.id',
        """\
        SELECT
          *
        FROM
          t1
          GLOBAL ANY JOIN t2 ON t1.id = t2.id""",
    ),
    (
        'cross apply',
        'SELECT a FROM t CROSS APPLY fn(t.id)',
        """\
        SELECT
          a
        FROM
          t
          CROSS APPLY fn(t.id)""",
    ),
    (
        'returning',
        'INSERT INTO users (name, email) VALUES ($1, $2) RETURNING name, email',
        """\
        INSERT INTO
          users (name, email)
        VALUES
          ($1, $2)
        RETURNING
          name,
          email""",
    ),
    (
        'operators',
        'SELECT a->>2, b @> c, d ~~ e, f<->g, h - -1 FROM t',
        """\
        SELECT
          a ->> 2,
          b @> c,
          d ~~ e,
          f <-> g,
          h - -1
        FROM
          t""",
    ),
    (
        'escaped strings',
        """SELECT "foo \\" JOIN bar", 'it''s', `back``tick` FROM t""",
        """\
        SELECT
          "foo \\" JOIN bar",
          'it''s',
          `back``tick`
        FROM
          t""",
    ),
    (
        'unicode',
        'SELECT тест FROM таблица',
        """\
        SELECT
          тест
        FROM
          таблица""",
    ),
    (
        'dollar quoted function body',
        'CREATE FUNCTION abc() AS $$ SELECT * FROM table $$ LANGUAGE plpgsql;',
        """\
        CREATE FUNCTION abc() AS
        $$
        SELECT
          *
        FROM
          table
        $$
        LANGUAGE plpgsql;""",
    ),
    (
        'incomplete',
        'SELECT count(',
        """\
        SELECT
          count(""",
    ),
    ('lonely semicolon', ';', ';'),
    ('statements', 'foo;bar;', 'foo;\nbar;'),
    ('separator on its own line', 'foo\n;bar;', 'foo;\nbar;'),
]


@pytest.mark.parametrize('label, query, expected', DEFAULT_CASES, ids=[c[0] for c in DEFAULT_CASES])
def test_default_options(label, query, expected):
    assert sqlpretty.format(query) == dedent(expected)


def test_lines_between_queries():
    expected = dedent("""\
        SELECT
          a;

        SELECT
          b;""")
    assert fmt('SELECT a; SELECT b;', lines_between_queries=2) == expected


def test_indent_width_and_tabs():
    assert fmt('SELECT a FROM b', indent=4) == 'SELECT\n    a\nFROM\n    b'
    assert fmt('SELECT a FROM b', indent=Indent.tabs()) == 'SELECT\n\ta\nFROM\n\tb'


@pytest.mark.parametrize('uppercase, expected', [
    (True, 'SELECT DISTINCT\n  *\nFROM\n  foo\n  LEFT JOIN bar\nWHERE\n  cola > 1\n  AND colb = 3'),
    (False, 'select distinct\n  *\nfrom\n  foo\n  left join bar\nwhere\n  cola > 1\n  and colb = 3'),
    (None, 'select distinct\n  *\nfrOM\n  foo\n  left join bar\nWHERe\n  cola > 1\n  and colb = 3'),
])
def test_keyword_case(uppercase, expected):
    query = 'select distinct * frOM foo left join bar WHERe cola > 1 and colb = 3'
    assert fmt(query, uppercase=uppercase) == expected


def test_keyword_case_ignores_listed_words():
    result = fmt('select * from foo', uppercase=True, ignore_case_convert=['from'])
    assert result == 'SELECT\n  *\nfrom\n  foo'


def test_case_and_end_follow_keyword_case():
    result = fmt('select case when a then b else c end from t', uppercase=True)
    assert result == dedent("""\
        SELECT
          CASE
            WHEN a THEN b
            ELSE c
          END
        FROM
          t""")


def test_block_comments_are_reindented():
    query = 'SELECT\n/*\n * This is a block comment\n */\n* FROM\n-- This is another comment\nMyTable # One final comment\nWHERE 1 = 2;'
    expected = dedent("""\
        SELECT
          /*
           * This is a block comment
           */
          *
        FROM
          -- This is another comment
          MyTable # One final comment
        WHERE
          1 = 2;""")
    assert sqlpretty.format(query) == expected
    assert sqlpretty.format(expected) == expected


@pytest.mark.parametrize('query, expected', [
    ('SELECT a FROM b\n--comment\n;', 'SELECT\n  a\nFROM\n  b --comment\n;'),
    ('SELECT a --comment\n, b', 'SELECT\n  a --comment\n,\n  b'),
    ('SELECT a#comment, here\nFROM b--comment', 'SELECT\n  a #comment, here\nFROM\n  b --comment'),
    ('SELECT count(*)\n/*Comment', 'SELECT\n  count(*)\n  /*Comment'),
])
def test_comment_placement(query, expected):
    assert sqlpretty.format(query) == expected


def test_trailing_comments_after_commas():
    query = 'SELECT\n  a,          -- first\n  b -- second\nFROM t'
    assert sqlpretty.format(query) == 'SELECT\n  a,  -- first\n  b -- second\nFROM\n  t'


def test_comments_keep_their_own_lines():
    query = dedent("""\
        CREATE TABLE sales (
            -- order
            order_id BIGINT COMMENT 'Order id',

            -- customer
            customer_id BIGINT COMMENT 'Customer id'
        )

        -- where the data lives
        LOCATION '/warehouse/sales'

        TBLPROPERTIES (
            'orc.compress' = 'SNAPPY',          -- compression
            'transactional' = 'true'            -- transactions
        );""")
    expected = dedent("""\
        CREATE TABLE sales (
            -- order
            order_id BIGINT COMMENT 'Order id',
            -- customer
            customer_id BIGINT COMMENT 'Customer id'
        )
        -- where the data lives
        LOCATION '/warehouse/sales' TBLPROPERTIES (
            'orc.compress' = 'SNAPPY',  -- compression
            'transactional' = 'true' -- transactions
        );""")
    assert fmt(query, indent=4) == expected


def test_fmt_off_keeps_text_verbatim():
    query = (
        'SELECT              *     FROM   sometable\n'
        'WHERE\n'
        '-- comment test here\n'
        '     -- fmt: off\n'
        '    first_key.second_key = 1\n'
        '                    -- json:first_key.second_key = 1\n'
        '          -- fmt: on\n'
        '    AND\n'
        '       -- fm1t: off\n'
        '    first_key.second_key = 1\n'
        '                        --  json:first_key.second_key = 1\n'
        '    -- fmt:on'
    )
    expected = (
        'SELECT\n'
        '    *\n'
        'FROM\n'
        '    sometable\n'
        'WHERE\n'
        '    -- comment test here\n'
        '    first_key.second_key = 1\n'
        '                    -- json:first_key.second_key = 1\n'
        '    AND\n'
        '    -- fm1t: off\n'
        '    first_key.second_key = 1\n'
        '    --  json:first_key.second_key = 1'
    )
    assert fmt(query, indent=4) == expected


def test_fmt_off_to_end_of_input():
    query = 'select a from b; -- fmt: off\nselect   A   from   B'
    assert fmt(query, uppercase=True) == 'SELECT\n  a\nFROM\n  b;\nselect   A   from   B'


@pytest.mark.parametrize('comment, expected', [
    ('-- fmt: off', True),
    ('--fmt:off', True),
    ('/*  FMT  :  OFF */', True),
    ('-- fmt: on', False),
    ('--fmt:ON', False),
    ('-- fm1t: off', None),
    ('# fmt: off', None),
    ('-- fmt off', None),
    ('-- format: off', None),
])
def test_fmt_switch(comment, expected):
    from sqlpretty.formatter import fmt_switch
    assert fmt_switch(comment) is expected


class TestPostgres:
    def test_type_specifiers(self):
        query = 'SELECT id,  ARRAY [] :: UUID [] FROM UNNEST($1  ::  UUID   []) WHERE $1::UUID[] IS NOT NULL;'
        expected = dedent("""\
            SELECT
              id,
              ARRAY[]::UUID[]
            FROM
              UNNEST($1::UUID[])
            WHERE
              $1::UUID[] IS NOT NULL;""")
        assert fmt(query, dialect=Dialect.POSTGRESQL) == expected

    def test_nested_arrays(self):
        query = "SELECT ARRAY[['a','b'], ['c' ,'d']];"
        expected = dedent("""\
            SELECT
              ARRAY[
                ['a', 'b'],
                ['c', 'd']
              ];""")
        assert fmt(query, dialect=Dialect.POSTGRESQL, max_inline_block=10) == expected

    def test_array_subscripts(self):
        query = 'SELECT a [ 1 ] + b [ 2 ] [   5+1 ] > c [3] ;'
        assert fmt(query, dialect=Dialect.POSTGRESQL) == 'SELECT\n  a[1] + b[2][5 + 1] > c[3];'

    def test_arrays_as_arguments(self):
        query = "SELECT array_position(ARRAY['sun','mon','tue',  'wed',   'thu','fri',  'sat'], 'mon');"
        expected = dedent("""\
            SELECT
              array_position(
                ARRAY['sun', 'mon', 'tue', 'wed', 'thu', 'fri', 'sat'],
                'mon'
              );""")
        assert fmt(query, dialect=Dialect.POSTGRESQL) == expected


def test_casts_in_generic_dialect():
    assert sqlpretty.format('SELECT column::int FROM t') == 'SELECT\n  column::int\nFROM\n  t'


BENCH_QUERIES = [
    ('SELECT * FROM my_table WHERE id = 1', None),
    (
        'SELECT t1.id, t1.name, t1.title, t1.description, t2.mothers_maiden_name, t2.first_girlfriend\n'
        'FROM my_table t1 LEFT JOIN other_table t2 ON t1.id = t2.other_id WHERE t2.order BETWEEN  17 AND 30',
        None,
    ),
    (
        'SELECT * FROM my_table WHERE id = :first OR id = :second OR id = :third',
        {'first': '1', 'second': '2', 'third': '3'},
    ),
    ('SELECT * FROM my_table WHERE id = ?1 OR id = ?2 OR id = ?0', ['0', '1', '2']),
    ('SELECT * FROM my_table WHERE id = ? OR id = ? OR id = ?', ['0', '1', '2']),
]


IDEMPOTENCE_OPTIONS = [
    FormatOptions(),
    FormatOptions(indent=4, uppercase=True),
    FormatOptions(max_inline_block=100, max_inline_arguments=50, max_inline_top_level=50),
    FormatOptions(joins_as_top_level=True, max_inline_top_level=50),
    FormatOptions(inline=True),
]


@pytest.mark.parametrize('options', IDEMPOTENCE_OPTIONS)
@pytest.mark.parametrize('query, params', BENCH_QUERIES)
def test_formatting_is_idempotent(query, params, options):
    once = sqlpretty.format(query, params, options)
    assert sqlpretty.format(once, options=options) == once


@pytest.mark.parametrize('query, params', BENCH_QUERIES)
def test_formatting_is_deterministic(query, params):
    assert sqlpretty.format(query, params) == sqlpretty.format(query, params)


def test_bench_params_are_substituted():
    query, params = BENCH_QUERIES[3]
    assert sqlpretty.format(query, params) == dedent("""\
        SELECT
          *
        FROM
          my_table
        WHERE
          id = 1
          OR id = 2
          OR id = 0""")
