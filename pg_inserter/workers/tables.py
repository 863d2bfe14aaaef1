import typing

from pg_inserter import names, settings
from pg_inserter.utils import utils


class TableSpec(typing.NamedTuple):
    """One insert target: generated columns, literal SQL columns, or a fixed statement."""

    table_name: str
    columns: typing.Tuple[typing.Tuple[str, int], ...] = ()
    literal_columns: typing.Tuple[typing.Tuple[str, str], ...] = ()
    statement: typing.Optional[str] = None
    timeout_s: float = 5

    @property
    def payload_shape(self) -> typing.Tuple[int, ...]:
        return tuple(length for _, length in self.columns)

    def build_query(self) -> str:
        if self.statement is not None:
            return self.statement

        column_names = [column for column, _ in self.columns]
        column_names += [column for column, _ in self.literal_columns]
        values = ["%s"] * len(self.columns)
        values += [expr for _, expr in self.literal_columns]

        return (
            f"INSERT INTO {utils.quote_ident(self.table_name)} "
            f"({utils.join_names([utils.quote_ident(c) for c in column_names])}) "
            f"VALUES ({utils.join_names(values)})"
        )


TIMESTAMP = TableSpec(
    names.TIMESTAMP_TABLE, literal_columns=(("created_at", "NOW()"),), timeout_s=3
)

BIGTABLE = TableSpec(
    names.BIGTABLE_TABLE,
    columns=tuple((column, 120) for column in ("cola", "colb", "colc", "cold", "cole")),
)

MAIN_TABLES = (
    TableSpec("artist", columns=(("name", 20),)),
    TableSpec("genre", columns=(("name", 120),)),
    TableSpec("media_type", columns=(("name", 120),)),
    TableSpec("playlist", columns=(("name", 120),)),
    TableSpec(
        "employee",
        columns=(
            ("last_name", 20),
            ("first_name", 20),
            ("title", 20),
            ("address", 60),
            ("city", 40),
            ("state", 40),
            ("country", 40),
            ("phone", 20),
            ("fax", 20),
            ("email", 60),
        ),
    ),
)

WAL_SWITCH = TableSpec("wal_switch", statement="SELECT pg_switch_wal()")

CATEGORY_TABLES = {
    settings.TIMESTAMP: (TIMESTAMP,),
    settings.BIGTABLE: (BIGTABLE,),
    settings.MAIN_TABLES: MAIN_TABLES,
    settings.WAL_SWITCHER: (WAL_SWITCH,),
}
