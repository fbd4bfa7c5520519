"""
Example 02: Model Mapping

This example demonstrates mapping query results to dataclasses and Pydantic
models, with renamed fields, population conditions and enum conversion.
"""

import enum
import tempfile
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel

from row_bind import BindingError, ConnectionConfig, DbConnector


class Role(enum.Enum):
    GUEST = 0
    MEMBER = 1
    ADMIN = 2


@dataclass
class UserDataclass:
    """User model using dataclass"""
    id: int = 0
    name: str | None = None
    role: Role = Role.GUEST


class UserPydantic(BaseModel):
    """User model using Pydantic"""
    user_id: int
    display_name: str
    active: bool


def main():
    # Set up database
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    db = DbConnector(ConnectionConfig(driver="sqlite", database=db_path))
    db.non_query("""
        CREATE TABLE users (
            UserId INTEGER PRIMARY KEY,
            DisplayName TEXT,
            role TEXT,
            active INTEGER DEFAULT 1
        )
    """)
    db.non_query("INSERT INTO users (DisplayName, role) VALUES ('Alice', 'admin')")
    db.non_query("INSERT INTO users (DisplayName, role) VALUES ('Bob', '1')")
    db.non_query("INSERT INTO users (DisplayName, role, active) VALUES (NULL, NULL, 0)")

    # Configure the dataclass mapper: renamed fields, id must be present
    db.mappers.configure(UserDataclass).map_required("id", "UserId").map("name", "DisplayName")

    print("=== Dataclass Mapping ===\n")
    for user in db.query(UserDataclass, "SELECT * FROM users ORDER BY UserId"):
        print(f"  {user}")
    print()

    # Pydantic model: snake_case attributes find CamelCase columns automatically
    print("=== Pydantic Mapping ===\n")
    for user in db.query(UserPydantic, "SELECT * FROM users ORDER BY UserId"):
        print(f"  {user!r}")
    print()

    # NOT NULL condition rejects rows with a null name
    strict = DbConnector(db.config)
    strict.mappers.configure(UserPydantic).not_null("display_name")
    try:
        strict.query(UserPydantic, "SELECT * FROM users ORDER BY UserId")
    except BindingError as e:
        print(f"BindingError: {e}")

    # Clean up
    strict.close()
    db.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
