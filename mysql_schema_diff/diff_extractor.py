"""
Schema diff extraction.

Compares an old and a new snapshot of table definitions and renders the
DDL needed to move from the first to the second:

    - tables only in the new snapshot are emitted as their CREATE TABLE text
    - tables in both snapshots get one ALTER TABLE with column and key changes
    - tables only in the old snapshot are left alone

Columns are matched by name and compared by their definition text. Keys are
matched by their column list text, separately for ordinary and unique keys.
"""

from logging import getLogger

from .table_structure import Table

logger = getLogger(__name__)


class DuplicateIdentifierError(ValueError):
    pass


def synthesize_index_name(column_spec: str) -> str:
    """Build an index name from a key column list.

    >>> synthesize_index_name('`a`,`b`')
    'a_b'
    """
    parts = column_spec.split(',')
    return '_'.join(
        part.replace('`', '').replace('(', '').replace(')', '') for part in parts
    )


def _index_by_name(items, kind, owner=None):
    result = {}
    for item in items:
        if item.name in result:
            where = f' in table {owner}' if owner else ''
            raise DuplicateIdentifierError(f'duplicate {kind} name {item.name}{where}')
        result[item.name] = item
    return result


def extract_diff(old_tables: list[Table], new_tables: list[Table]) -> str:
    old_table_map = _index_by_name(old_tables, 'table')
    new_table_map = _index_by_name(new_tables, 'table')

    logger.info(
        f'extracting diff: {len(old_table_map)} old tables, {len(new_table_map)} new tables'
    )

    statements = []
    for table_name in sorted(new_table_map):
        new_table = new_table_map[table_name]
        old_table = old_table_map.get(table_name)
        if old_table is None:
            logger.debug(f'table {table_name}: created')
            statements.append(f'{new_table.raw_definition};\n\n')
            continue
        statements.append(extract_table_diff(table_name, old_table, new_table))

    dropped = sorted(set(old_table_map) - set(new_table_map))
    if dropped:
        logger.debug(f'tables only in old schema (not dropped): {dropped}')

    return ''.join(statements)


def extract_table_diff(table_name: str, old_table: Table, new_table: Table) -> str:
    changes = extract_column_diff(old_table, new_table)
    changes += extract_key_diff(old_table, new_table)

    if not changes:
        logger.debug(f'table {table_name}: unchanged')
        return ''

    logger.debug(f'table {table_name}: {len(changes)} changes')
    return f"ALTER TABLE `{table_name}` {', '.join(changes)};\n\n"


def extract_column_diff(old_table: Table, new_table: Table) -> list[str]:
    old_column_map = _index_by_name(old_table.columns, 'column', old_table.name)
    new_column_map = _index_by_name(new_table.columns, 'column', new_table.name)

    # old order first, then columns that only exist in the new table
    all_column_names = old_table.column_names()
    all_column_names += [name for name in new_table.column_names() if name not in old_column_map]

    changes = []
    for column_name in all_column_names:
        if column_name not in old_column_map:
            changes.append(f'ADD `{column_name}` {new_column_map[column_name].definition}')
            continue

        if column_name not in new_column_map:
            changes.append(f'DROP `{column_name}`')
            continue

        new_definition = new_column_map[column_name].definition
        if old_column_map[column_name].definition != new_definition:
            changes.append(f'MODIFY `{column_name}` {new_definition}')

    return changes


def _extract_keys_diff(old_keys, new_keys, add_keyword):
    old_specs = {key.column_spec for key in old_keys}
    new_specs = {key.column_spec for key in new_keys}

    changes = []
    for key in new_keys:
        if key.column_spec in old_specs:
            continue
        name = synthesize_index_name(key.column_spec)
        changes.append(f'{add_keyword} `{name}` ({key.column_spec})')

    for key in old_keys:
        if key.column_spec in new_specs:
            continue
        changes.append(f'DROP INDEX `{key.name}`')

    return changes


def extract_ordinary_key_diff(old_table: Table, new_table: Table) -> list[str]:
    return _extract_keys_diff(old_table.ordinary_keys, new_table.ordinary_keys, 'ADD INDEX')


def extract_unique_key_diff(old_table: Table, new_table: Table) -> list[str]:
    return _extract_keys_diff(old_table.unique_keys, new_table.unique_keys, 'ADD UNIQUE INDEX')


def extract_key_diff(old_table: Table, new_table: Table) -> list[str]:
    changes = extract_ordinary_key_diff(old_table, new_table)
    changes += extract_unique_key_diff(old_table, new_table)
    return changes
