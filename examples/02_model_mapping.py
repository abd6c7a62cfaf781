"""
Example 02: Model Mapping

This example demonstrates Pydantic models with tagged columns, promoted
embedded fields, plain classes registered by hand and dict-row mapping.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from pydantic import BaseModel

from row_nest import (
    MapperConfig,
    StructMapper,
    TypeRegistry,
    UnknownColumnPolicy,
    column,
    model_column,
    select,
    structure,
)


class Department(BaseModel):
    """Department model using Pydantic"""
    id: int = 0
    title: str = model_column("name", default="")


@dataclass
class Timestamps:
    created_at: str = ""


@dataclass
class Employee:
    """Employee model using dataclass"""
    id: int
    name: str
    department: Department | None = column("dept", default=None)
    stamps: Timestamps = column(embedded=True, default_factory=Timestamps)


class Badge:
    """Plain class, registered explicitly"""
    def __init__(self, code: str, owner: Employee | None = None) -> None:
        self.code = code
        self.owner = owner


QUERY = """
    SELECT e.id, e.name, e.created_at,
           COALESCE(d.id, 0) AS dept_id, COALESCE(d.name, '') AS dept_name
    FROM employees e LEFT JOIN departments d ON d.id = e.department_id
    ORDER BY e.id
"""


def main():
    conn = sqlite3.connect(":memory:")
    conn.executescript("""
        CREATE TABLE departments (id INTEGER PRIMARY KEY, name TEXT NOT NULL);
        CREATE TABLE employees (
            id INTEGER PRIMARY KEY, name TEXT NOT NULL,
            department_id INTEGER, created_at TEXT NOT NULL
        );
        INSERT INTO departments VALUES (10, 'Research');
        INSERT INTO employees VALUES (1, 'Ann', 10, '2024-01-01');
        INSERT INTO employees VALUES (2, 'Ben', NULL, '2024-02-01');
    """)

    registry = TypeRegistry(MapperConfig(unknown_columns=UnknownColumnPolicy.STRICT))

    print("=== Model Mapping ===\n")

    print("1. Tagged and promoted columns:")
    for employee in select(conn.execute(QUERY), list[Employee], registry=registry):
        print(f"   {employee}")
    print()

    print("2. Registered plain class:")
    registry.register(structure(Badge).auto_fields().build())
    badge = select(
        conn.execute("SELECT 'B-1' AS code, id AS owner_id, name AS owner_name FROM employees"),
        Badge,
        registry=registry,
    )
    print(f"   {badge.code} -> {badge.owner}\n")

    print("3. Dict rows:")
    conn.row_factory = sqlite3.Row
    rows = [dict(row) for row in conn.execute(QUERY).fetchall()]
    mapper = StructMapper(Employee, registry=registry)
    for employee in mapper.map_many(rows):
        print(f"   - {employee.name}: {employee.department}")

    conn.close()


if __name__ == "__main__":
    main()
