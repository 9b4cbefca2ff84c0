"""
apply_migrations.py
-------------------
Brings a SQLite ledger created before the partial-payment and loan status
columns existed up to date, then stamps the Alembic version table so
`flask db upgrade` stays in sync.

Usage:
    python apply_migrations.py [path/to/lendledger.db]
"""

import sqlite3
import os
import sys

# Flask-SQLAlchemy keeps relative SQLite databases in the instance folder
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DB_PATH = os.path.join(BASE_DIR, 'instance', 'lendledger.db')

# (revision, table, column, column definition), oldest first
MIGRATIONS = [
    ('5c1e2f7a9b30', 'payments', 'due_amount', "NUMERIC(15, 2) DEFAULT 0"),
    ('8d4b6a1c2e57', 'loans', 'status', "VARCHAR(20) NOT NULL DEFAULT 'active'"),
]
HEAD_REVISION = MIGRATIONS[-1][0]


def report(msg, tag=None, stream=None):
    prefix = f"[{tag}] " if tag else ""
    print(f"  {prefix}{msg}", file=stream or sys.stdout)


def column_exists(cursor, table, column):
    cursor.execute(f"PRAGMA table_info({table})")
    return column in (row[1] for row in cursor.fetchall())


def _has_version_table(cursor):
    cursor.execute("SELECT 1 FROM sqlite_master WHERE type='table' AND name='alembic_version'")
    return cursor.fetchone() is not None


def get_current_revision(cursor):
    """Alembic revision the file is stamped with, None when unstamped"""
    if not _has_version_table(cursor):
        return None
    cursor.execute("SELECT version_num FROM alembic_version")
    row = cursor.fetchone()
    return row[0] if row else None


def stamp(cursor, revision):
    if not _has_version_table(cursor):
        report("no alembic_version table, leaving the file unstamped", 'SKIP')
        return
    cursor.execute("DELETE FROM alembic_version")
    cursor.execute("INSERT INTO alembic_version (version_num) VALUES (?)", (revision,))


def apply(db_path):
    """Add every missing ledger column; returns True when anything changed"""
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()
    changed = False

    try:
        report(f"stamped revision: {get_current_revision(cursor) or '(none)'}")
        for revision, table, column, definition in MIGRATIONS:
            if column_exists(cursor, table, column):
                report(f"{table}.{column} present", 'SKIP')
            else:
                cursor.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition}")
                report(f"{table}.{column} added ({revision})", 'OK')
                changed = True
            stamp(cursor, revision)
            conn.commit()
    except sqlite3.OperationalError:
        conn.rollback()
        raise
    finally:
        conn.close()

    return changed


def main():
    db_path = sys.argv[1] if len(sys.argv) > 1 else DB_PATH
    if not os.path.exists(db_path):
        report(f"no database at {db_path}; run `python run.py init-db` first", 'ERR', sys.stderr)
        sys.exit(1)

    report(f"upgrading {db_path}")
    try:
        changed = apply(db_path)
    except sqlite3.OperationalError as exc:
        report(f"upgrade failed: {exc}", 'ERR', sys.stderr)
        sys.exit(1)

    report("ledger columns added" if changed else "ledger already up to date")
    report(f"now at revision {HEAD_REVISION}")

if __name__ == '__main__':
    main()
