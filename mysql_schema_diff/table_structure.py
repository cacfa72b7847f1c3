from dataclasses import dataclass, field


@dataclass(frozen=True)
class Column:
    name: str = ''
    definition: str = ''


@dataclass(frozen=True)
class OrdinaryKey:
    name: str = ''
    column_spec: str = ''


@dataclass(frozen=True)
class UniqueKey:
    name: str = ''
    column_spec: str = ''


@dataclass(frozen=True)
class Table:
    name: str = ''
    raw_definition: str = ''
    columns: tuple = field(default_factory=tuple)
    ordinary_keys: tuple = field(default_factory=tuple)
    unique_keys: tuple = field(default_factory=tuple)
    primary_keys: tuple = field(default_factory=tuple)

    def column_names(self):
        return [column.name for column in self.columns]
