from pg_inserter.workers.tables import TableSpec


class InsertTask:
    """One statement execution against one table.

    No retry happens here: an ExecutionError raised by the pool reaches the
    caller unchanged.
    """

    def __init__(self, table: TableSpec, generator=None):
        if table.columns and generator is None:
            raise ValueError(f"table '{table.table_name}' needs a payload generator")

        self.table = table
        self.generator = generator
        self.query = table.build_query()

    @property
    def table_name(self):
        return self.table.table_name

    def build_params(self):
        if not self.table.columns:
            return None
        return self.generator.generate_row(self.table.columns)

    def execute(self, pool):
        pool.execute(
            self.query,
            self.build_params(),
            timeout_s=self.table.timeout_s,
            table_name=self.table.table_name,
        )
