import re
from logging import getLogger

import sqlparse
from pyparsing import (
    CaselessKeyword, Optional, ParseException, QuotedString, Suppress, Word, alphanums,
    nestedExpr, originalTextFor,
)

from .diff_extractor import DuplicateIdentifierError
from .table_structure import Column, OrdinaryKey, Table, UniqueKey

logger = getLogger(__name__)


CREATE_TABLE_PATTERN = re.compile(r'^\s*CREATE\s+TABLE\b', re.IGNORECASE)
SKIPPED_DEFINITION_PATTERN = re.compile(
    r'^(CONSTRAINT|FOREIGN\s+KEY|FULLTEXT|SPATIAL|CHECK)\b', re.IGNORECASE,
)
UNIQUE_KEY_PATTERN = re.compile(r'^UNIQUE\b', re.IGNORECASE)
ORDINARY_KEY_PATTERN = re.compile(r'^(KEY|INDEX)\b', re.IGNORECASE)
PRIMARY_KEY_PATTERN = re.compile(r'^PRIMARY\s+KEY\b', re.IGNORECASE)

_identifier = QuotedString('`') | Word(alphanums + '_$')
# keeps the column list text exactly as written, parentheses included
_column_list = originalTextFor(nestedExpr('(', ')'))

KEY_DEFINITION = (
    Optional(Suppress(CaselessKeyword('UNIQUE')))
    + Optional(Suppress(CaselessKeyword('KEY') | CaselessKeyword('INDEX')))
    + Optional(_identifier)
    + _column_list
)
PRIMARY_KEY_DEFINITION = (
    Suppress(CaselessKeyword('PRIMARY')) + Suppress(CaselessKeyword('KEY')) + _column_list
)


class SchemaParseError(ValueError):
    pass


def strip_sql_name(name):
    name = name.strip()
    if name.startswith('`'):
        name = name[1:]
    if name.endswith('`'):
        name = name[:-1]
    return name


def split_high_level(data, token):
    """Split *data* on *token* outside of parentheses and quoted strings."""
    results = []
    level = 0
    quote_char = None
    curr_data = ''
    prev_char = ''
    for c in data:
        if quote_char is not None:
            if c == quote_char and prev_char != '\\':
                quote_char = None
            curr_data += c
            prev_char = c
            continue
        if c == token and level == 0:
            results.append(curr_data.strip())
            curr_data = ''
            prev_char = c
            continue
        if c in ("'", '"', '`'):
            quote_char = c
        elif c == '(':
            level += 1
        elif c == ')':
            level -= 1
        curr_data += c
        prev_char = c
    if curr_data.strip():
        results.append(curr_data.strip())
    return results


def strip_sql_comments(sql_statement):
    return sqlparse.format(sql_statement, strip_comments=True).strip()


def _is_comment_or_whitespace(token):
    return (
        token.is_whitespace
        or isinstance(token, sqlparse.sql.Comment)
        or token.ttype in sqlparse.tokens.Comment
    )


def _statement_text(sql_statement):
    """Statement text without leading comments and without the closing ``;``."""
    parsed = sqlparse.parse(sql_statement)
    if not parsed:
        return ''
    tokens = list(parsed[0].tokens)
    while tokens and _is_comment_or_whitespace(tokens[0]):
        tokens.pop(0)
    for i, token in enumerate(tokens):
        if token.match(sqlparse.tokens.Punctuation, ';'):
            tokens = tokens[:i]
            break
    return ''.join(str(token) for token in tokens).strip()


def _column_names_from_spec(column_spec):
    names = []
    for part in split_high_level(column_spec, ','):
        # drop prefix length and ordering, e.g. `name`(10) DESC
        if part.startswith('`'):
            names.append(part[1:part.find('`', 1)])
        else:
            names.append(re.split(r'[\s(]', part, maxsplit=1)[0])
    return names


def _parse_key(line):
    try:
        result = KEY_DEFINITION.parseString(line)
    except ParseException as e:
        raise SchemaParseError(f'wrong key definition: {line}') from e
    column_spec = result[-1][1:-1]
    if len(result) > 1:
        name = result[0]
    else:
        # mysql names an unnamed key after its first column
        column_names = _column_names_from_spec(column_spec)
        name = column_names[0] if column_names else ''
    return name, column_spec


def _parse_column(line, create_statement):
    if line.startswith('`'):
        end_pos = line.find('`', 1)
        if end_pos == -1:
            raise SchemaParseError(f'unterminated column name: {line}')
        column_name = line[1:end_pos]
        definition = line[end_pos + 1:].strip()
    else:
        parts = line.split(None, 1)
        column_name = strip_sql_name(parts[0])
        definition = parts[1].strip() if len(parts) > 1 else ''
    if not definition:
        raise SchemaParseError(f'column {column_name} has no definition in {create_statement}')
    return Column(name=column_name, definition=definition)


def parse_table(create_statement) -> Table:
    """Parse one ``CREATE TABLE`` statement (e.g. ``SHOW CREATE TABLE`` output).

    ``raw_definition`` keeps the statement text with its comments and
    version-conditional clauses. Columns and keys are read from a copy
    with comments stripped.
    """
    raw_definition = _statement_text(create_statement)
    create_statement = strip_sql_comments(create_statement).rstrip(';').rstrip()

    parsed = sqlparse.parse(create_statement)
    if not parsed:
        raise SchemaParseError('empty create statement')
    tokens = [t for t in parsed[0].tokens if not t.is_whitespace]

    # remove "IF NOT EXISTS", a single keyword token in newer sqlparse
    if len(tokens) > 3 and ' '.join(tokens[2].normalized.upper().split()) == 'IF NOT EXISTS':
        del tokens[2]
    elif (len(tokens) > 5 and
            tokens[2].normalized.upper() == 'IF' and
            tokens[3].normalized.upper() == 'NOT' and
            tokens[4].normalized.upper() == 'EXISTS'):
        del tokens[2:5]

    if len(tokens) < 4:
        raise SchemaParseError(f'wrong create statement: {raw_definition}')
    if tokens[0].ttype != sqlparse.tokens.DDL or tokens[0].normalized.upper() != 'CREATE':
        raise SchemaParseError(f'wrong create statement: {raw_definition}')
    if tokens[1].normalized.upper() != 'TABLE':
        raise SchemaParseError(f'wrong create statement: {raw_definition}')
    if not isinstance(tokens[2], sqlparse.sql.Identifier):
        raise SchemaParseError(f'wrong create statement: {raw_definition}')

    # get_real_name() drops the database part of `<dbname>.<tablename>`
    table_name = strip_sql_name(tokens[2].get_real_name())

    if not isinstance(tokens[3], sqlparse.sql.Parenthesis):
        raise SchemaParseError(
            f'unsupported create statement for table {table_name}: {raw_definition}'
        )

    body = str(tokens[3])[1:-1]

    columns = []
    ordinary_keys = []
    unique_keys = []
    primary_keys = ()
    for line in split_high_level(body, ','):
        if not line:
            continue

        if line.startswith('`'):
            columns.append(_parse_column(line, raw_definition))
            continue
        if SKIPPED_DEFINITION_PATTERN.match(line):
            continue
        if PRIMARY_KEY_PATTERN.match(line):
            try:
                result = PRIMARY_KEY_DEFINITION.parseString(line)
            except ParseException as e:
                raise SchemaParseError(f'wrong primary key definition: {line}') from e
            primary_keys = tuple(_column_names_from_spec(result[-1][1:-1]))
            continue
        if UNIQUE_KEY_PATTERN.match(line):
            name, column_spec = _parse_key(line)
            unique_keys.append(UniqueKey(name=name, column_spec=column_spec))
            continue
        if ORDINARY_KEY_PATTERN.match(line):
            name, column_spec = _parse_key(line)
            ordinary_keys.append(OrdinaryKey(name=name, column_spec=column_spec))
            continue

        columns.append(_parse_column(line, raw_definition))

    if not primary_keys:
        primary_keys = tuple(
            column.name for column in columns if 'primary key' in column.definition.lower()
        )

    return Table(
        name=table_name,
        raw_definition=raw_definition,
        columns=tuple(columns),
        ordinary_keys=tuple(ordinary_keys),
        unique_keys=tuple(unique_keys),
        primary_keys=primary_keys,
    )


def parse_schema(sql_text) -> list[Table]:
    """Parse every ``CREATE TABLE`` statement of a schema dump.

    Other statements (``SET``, ``DROP TABLE``, ``INSERT`` ...) are skipped.
    """
    tables = []
    table_names = set()
    for statement in sqlparse.split(sql_text):
        stripped = strip_sql_comments(statement)
        if not stripped:
            continue
        if not CREATE_TABLE_PATTERN.match(stripped):
            logger.debug(f'skipping statement: {stripped[:60]}')
            continue
        table = parse_table(statement)
        if table.name in table_names:
            raise DuplicateIdentifierError(f'duplicate table name {table.name}')
        table_names.add(table.name)
        tables.append(table)
    logger.debug(f'parsed {len(tables)} tables')
    return tables
