#!/usr/bin/env python3
"""
Create and seed the sample tables the Database Explorer is demonstrated with.
Also used to prepare the database before running integration tests.
"""
import sys
from pathlib import Path

# Add src to path so we can import from db_explorer
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from db_explorer.db import Database, DatabaseConfig
from db_explorer.errors import DatabaseError


def init_database():
    """Execute the SQL schema initialization script."""
    sql_file = Path(__file__).parent.parent / "sql" / "001_init.sql"

    if not sql_file.exists():
        print(f"Error: SQL file not found at {sql_file}")
        sys.exit(1)

    sql_content = sql_file.read_text(encoding="utf-8")

    with Database(DatabaseConfig()) as db:
        if not db.is_connected:
            print(f"[ERROR] Could not connect to {db.config.describe()}")
            sys.exit(1)
        try:
            # Re-seed from scratch
            db.run_query("DROP TABLE IF EXISTS event, person CASCADE")
            db.run_query(sql_content)
            print("[OK] Database schema initialized successfully")
            print(f"   - Executed: {sql_file}")
            print(f"   - Tables: {', '.join(db.list_tables())}")
        except DatabaseError as e:
            print(f"[ERROR] Database initialization failed: {e.message}")
            sys.exit(1)


if __name__ == "__main__":
    init_database()
