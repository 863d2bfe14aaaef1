TIMESTAMP_TABLE = "timestamp"
BIGTABLE_TABLE = "bigtable"

# Every table created by 00-create-tables.sql, dependents first.
DEMO_TABLES = (
    "timestamp",
    "invoice_line",
    "invoice",
    "playlist_track",
    "track",
    "album",
    "artist",
    "customer",
    "employee",
    "genre",
    "media_type",
    "playlist",
    "bigtable",
)

CREATE_TABLES_FILE = "00-create-tables.sql"
INSERT_DATA_FILE = "01-insert-data.sql"
