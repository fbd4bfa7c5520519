"""
Example 04: Transactions

This example demonstrates DbContext transactions with automatic rollback on errors.
"""

import tempfile
from dataclasses import dataclass
from pathlib import Path

from row_bind import ConnectionConfig, DbConnector, RowBindError


@dataclass
class User:
    name: str
    email: str


def main():
    # Set up database
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    db = DbConnector(ConnectionConfig(driver="sqlite", database=db_path))
    db.non_query("""
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE
        )
    """)
    db.non_query("""
        CREATE TABLE audit_log (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            action TEXT NOT NULL,
            timestamp DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)

    create_user = "INSERT INTO users (name, email) VALUES (:name, :email)"
    log_action = "INSERT INTO audit_log (action) VALUES (:action)"
    count_users = "SELECT COUNT(*) FROM users"

    print("=== Transaction Management ===\n")

    # Example 1: Successful transaction
    print("1. Successful transaction:")
    with db.open_context() as ctx:
        ctx.non_query(create_user, User("Alice", "alice@example.com"))
        ctx.non_query(log_action, {"action": "user_created"})
        # Commits automatically on exit
    print(f"   Users after commit: {db.query_value(int, count_users)}\n")

    # Example 2: Transaction with rollback on error
    print("2. Transaction with error (automatic rollback):")
    try:
        with db.open_context() as ctx:
            ctx.non_query(create_user, User("Bob", "bob@example.com"))
            # This will fail due to duplicate email
            ctx.non_query(create_user, User("Charlie", "alice@example.com"))
    except RowBindError as e:
        print(f"   Error occurred: {type(e).__name__}")
        print("   Transaction was rolled back automatically\n")
    print(f"   Users after rollback: {db.query_value(int, count_users)} (Bob was not added)\n")

    # Example 3: Bulk insert and explicit commit
    print("3. Bulk insert in a transaction:")
    with db.open_context() as ctx:
        ctx.bulk_insert("users", [User("Dave", "dave@example.com"), User("Eve", "eve@example.com")])
        ctx.non_query(log_action, {"action": "users_imported"})
        ctx.commit()
        print(f"   Context state: {ctx.state}")
    print(f"   Users after transaction: {db.query_value(int, count_users)}")
    print(f"   Users: {db.query(User, 'SELECT name, email FROM users ORDER BY id')}\n")

    # Clean up
    db.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
