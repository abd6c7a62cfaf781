"""
Example 01: Nested Scanning

This example demonstrates scanning a self-joined result set into a
recursive dataclass. Related rows are addressed by <field>_<column> and
relations missing from the outer join come back as None.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from row_nest import RowScanner, column, select


@dataclass
class Person:
    """Person with an optional child"""
    id: int
    name: str
    child: Person | None = column("child", default=None)


QUERY = """
    SELECT p.id AS id, p.name AS name,
           COALESCE(c.id, 0) AS child_id, COALESCE(c.name, '') AS child_name
    FROM people p LEFT JOIN people c ON c.id = p.child_id
    ORDER BY p.id
"""


def main():
    conn = sqlite3.connect(":memory:")
    conn.executescript("""
        CREATE TABLE people (id INTEGER PRIMARY KEY, name TEXT NOT NULL, child_id INTEGER);
        INSERT INTO people VALUES (1, 'John', 5);
        INSERT INTO people VALUES (2, 'Bob', NULL);
        INSERT INTO people VALUES (5, 'Kid', NULL);
    """)

    print("=== Nested Scanning ===\n")

    print("1. Every row:")
    for person in select(conn.execute(QUERY), list[Person]):
        print(f"   {person}")
    print()

    print("2. First row only:")
    print(f"   {select(conn.execute(QUERY), Person)}\n")

    print("3. Streaming with a scanner:")
    scanner = RowScanner(conn.execute(QUERY), Person)
    print(f"   Unresolved columns: {scanner.plan.unresolved}")
    for person in scanner:
        child = person.child.name if person.child else "-"
        print(f"   - {person.name} (child: {child})")

    conn.close()


if __name__ == "__main__":
    main()
