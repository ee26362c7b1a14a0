"""
Schema migrations for catalog databases created before WordPress sync.

Older catalog tables have no sync columns. SQLite ALTER TABLE ADD COLUMN adds
them in place; each step is idempotent (columns are only added if absent).

Called automatically from get_engine() after create_all().
"""
from sqlalchemy import inspect, text

# Columns every syncable table needs, with their SQLite types
SYNC_COLUMNS = (
    ("wordpress_id", "INTEGER"),
    ("sync_status", "VARCHAR NOT NULL DEFAULT 'unsynced'"),
    ("last_synced_at", "DATETIME"),
    ("pods_data", "JSON"),
)

SYNCABLE_TABLES = ("movie", "actor", "director", "experiment")

# OMDb columns added to movie after the first release
MOVIE_OMDB_COLUMNS = (
    "rotten_tomatoes_rating",
    "rotten_tomatoes_url",
    "imdb_rating",
    "imdb_votes",
    "metacritic_rating",
    "awards",
    "dvd_release",
    "website_url",
    "box_office_enhanced",
    "plot_enhanced",
)


def run_migrations(engine) -> None:
    """Apply all pending schema migrations.

    Safe to call multiple times. SQLite only (uses PRAGMA table_info); other
    backends are expected to be managed by create_all.

    Args:
        engine: SQLAlchemy engine (SQLModel create_engine result).
    """
    if engine.dialect.name != "sqlite":
        return

    existing_tables = set(inspect(engine).get_table_names())
    with engine.connect() as conn:
        for table in SYNCABLE_TABLES:
            if table not in existing_tables:
                continue
            for column, col_type in SYNC_COLUMNS:
                _add_column_if_missing(conn, table, column, col_type)
            _create_index_if_missing(
                conn, f"ix_{table}_wordpress_id", table, "wordpress_id", unique=True
            )

        if "movie" in existing_tables:
            for column in MOVIE_OMDB_COLUMNS:
                _add_column_if_missing(conn, "movie", column, "VARCHAR")

        conn.commit()


def _add_column_if_missing(conn, table: str, column: str, col_type: str) -> None:
    """Add a column to a table if it doesn't already exist.

    Args:
        conn: SQLAlchemy connection.
        table: Table name (lowercase, as SQLite stores it).
        column: Column name to add.
        col_type: SQLite column definition, e.g. "INTEGER", "DATETIME".
    """
    result = conn.execute(text(f"PRAGMA table_info({table})"))
    existing_columns = {row[1] for row in result}
    if column not in existing_columns:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {col_type}"))


def _create_index_if_missing(
    conn, name: str, table: str, column: str, unique: bool = False
) -> None:
    kind = "UNIQUE INDEX" if unique else "INDEX"
    conn.execute(text(f"CREATE {kind} IF NOT EXISTS {name} ON {table} ({column})"))
