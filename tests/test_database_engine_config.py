def test_get_engine_kwargs_sqlite_has_check_same_thread(monkeypatch):
    # Import lazily so monkeypatch can affect env usage deterministically.
    from tasktracker.database import database as db

    kwargs = db.get_engine_kwargs("sqlite:///./tasktracker.db")
    assert "connect_args" in kwargs
    assert kwargs["connect_args"]["check_same_thread"] is False
    # SQLite should not require pool sizing knobs.
    assert "pool_size" not in kwargs
    assert "max_overflow" not in kwargs
    assert kwargs["pool_pre_ping"] is True


def test_get_engine_kwargs_postgres_uses_pool_settings(monkeypatch):
    from tasktracker.database import database as db

    monkeypatch.setenv("DB_POOL_SIZE", "3")
    monkeypatch.setenv("DB_MAX_OVERFLOW", "2")
    monkeypatch.setenv("DB_POOL_TIMEOUT_SEC", "10")

    kwargs = db.get_engine_kwargs("postgresql+psycopg://u:p@localhost:5432/db")
    assert "connect_args" not in kwargs
    assert kwargs["pool_pre_ping"] is True
    assert kwargs["pool_size"] == 3
    assert kwargs["max_overflow"] == 2
    assert kwargs["pool_timeout"] == 10


def test_debug_enables_echo(monkeypatch):
    from tasktracker.database import database as db

    monkeypatch.setenv("DEBUG", "true")
    assert db.get_engine_kwargs("sqlite:///./tasktracker.db")["echo"] is True


def test_sqlite_pragmas_listener_is_guarded():
    from tasktracker.database import database as db

    assert db._is_sqlite_url("sqlite:///./tasktracker.db") is True
    assert db._is_sqlite_url("postgresql+psycopg://u:p@localhost/db") is False


def test_ensure_legacy_schema_adds_ledger_columns_for_sqlite(tmp_path):
    """Task tables from before the ledgers get status_history and remaining_hours added in place."""
    from sqlalchemy import create_engine, text
    from tasktracker.database import database as db

    db_path = tmp_path / "legacy.db"
    url = f"sqlite:///{db_path}"
    engine = create_engine(url, connect_args={"check_same_thread": False})

    # Create a minimal legacy schema missing the new columns.
    with engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TABLE IF NOT EXISTS tasks ("
                "id VARCHAR PRIMARY KEY,"
                "title VARCHAR,"
                "status VARCHAR,"
                "estimate FLOAT"
                ")"
            )
        )

    # Apply compatibility patch.
    db.ensure_legacy_schema_compat(engine_override=engine, database_url_override=url)

    # Verify columns exist.
    raw = engine.raw_connection()
    try:
        assert db._sqlite_table_has_column(raw, "tasks", "status_history") is True
        assert db._sqlite_table_has_column(raw, "tasks", "remaining_hours") is True
    finally:
        raw.close()

    # Running it again is harmless.
    db.ensure_legacy_schema_compat(engine_override=engine, database_url_override=url)


def test_ensure_legacy_schema_skips_non_sqlite():
    from tasktracker.database import database as db

    # Must return before touching any engine.
    db.ensure_legacy_schema_compat(engine_override=object(), database_url_override="postgresql://u:p@h/db")
