"""
Example 03: Bulk Insert

This example demonstrates writing entities back as rows with
EntityRowAdapter: ignored properties, to_db converters and executemany.
"""

import datetime
import tempfile
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from row_bind import ConnectionConfig, DbConnector


@dataclass
class Event:
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    kind: str = ""
    happened: datetime.datetime = field(default_factory=datetime.datetime.now)
    # computed in Python, never stored
    label: str = ""
    # written, never read back
    checksum: str = ""


def main():
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    db = DbConnector(ConnectionConfig(driver="sqlite", database=db_path))
    db.non_query(
        "CREATE TABLE events (id TEXT PRIMARY KEY, kind TEXT, happened TEXT, checksum TEXT)"
    )

    (
        db.mappers.configure(Event)
        .map("id", to_db=str)
        .map("happened", to_db=datetime.datetime.isoformat)
        .ignore("label")
        .ignore_on_load("checksum")
        .after_binding(lambda record, event: setattr(event, "label", f"{event.kind}@{event.happened:%H:%M}"))
    )

    events = [Event(kind=kind, checksum=kind[::-1]) for kind in ("login", "upload", "logout")]

    print("=== Rows exposed for writing ===\n")
    rows = db.entity_rows(events)
    print(f"fields: {rows.field_names}")
    for values in rows:
        print(f"  {values}")
    print()

    with db.open_context() as ctx:
        written = ctx.bulk_insert("events", events)
    print(f"bulk_insert wrote {written} rows\n")

    print("=== Loaded back ===\n")
    for event in db.query(Event, "SELECT * FROM events ORDER BY happened"):
        print(f"  {event.label}: id={event.id} checksum={event.checksum!r}")

    db.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
