"""
Example 01: Basic Query Execution

This example demonstrates running SQL through a DbConnector and mapping
single-column and tuple results.
"""

import datetime
import tempfile
from pathlib import Path

from row_bind import ConnectionConfig, DbConnector


def main():
    # Create a temporary database
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    db = DbConnector(ConnectionConfig(driver="sqlite", database=db_path))

    db.non_query("""
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            joined TEXT,
            active INTEGER DEFAULT 1
        )
    """)
    db.non_query(
        "INSERT INTO users (name, email, joined) VALUES (:name, :email, :joined)",
        {"name": "Alice", "email": "alice@example.com", "joined": "2023-01-15 09:00:00"},
    )
    db.non_query(
        "INSERT INTO users (name, email, joined) VALUES (:name, :email, :joined)",
        {"name": "Bob", "email": "bob@example.com", "joined": None},
    )
    db.non_query(
        "INSERT INTO users (name, email, active) VALUES (:name, :email, 0)",
        [("@name", "Charlie"), ("@email", "charlie@example.com")],
    )

    print("=== Basic Query Execution ===\n")

    # query_scalar: raw first column of the first row
    count = db.query_scalar("SELECT COUNT(*) FROM users")
    print(f"query_scalar result: {count} total users\n")

    # query_value: first column converted to a type
    active = db.query_value(bool, "SELECT active FROM users WHERE name = :name", {"name": "Charlie"})
    print(f"query_value result: Charlie active = {active}\n")

    # query with a value type: one value per row
    names = db.query(str, "SELECT name FROM users WHERE active = 1 ORDER BY id")
    print(f"query(str) result: {names}\n")

    # query with a tuple type: column i -> element i, nulls -> type defaults
    rows = db.query(tuple[int, datetime.datetime], "SELECT id, joined FROM users ORDER BY id")
    print("query(tuple[int, datetime]) result:")
    for user_id, joined in rows:
        print(f"  - {user_id}: {joined}")
    print()

    # query_reader: lazy, single pass; holds its connection until closed
    with db.query_reader(str, "SELECT email FROM users ORDER BY id") as reader:
        for email in reader:
            print(f"  streamed: {email}")

    # Clean up
    db.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
