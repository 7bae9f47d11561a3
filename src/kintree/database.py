"""SQLite persistence for the family graph."""

from pathlib import Path
import sqlite3

from kintree.models import Gender, Person, RelationshipEdge, RelationshipType
from kintree.store import RelationshipStore


def create_database(db_path: Path | str) -> sqlite3.Connection:
    """Create SQLite database with person and relationship tables."""
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS person (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            gender TEXT NOT NULL,
            birth_year INTEGER NOT NULL,
            death_year INTEGER,
            occupation TEXT,
            birthplace TEXT,
            notes TEXT,
            image_ref TEXT
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS relationship (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            from_id TEXT NOT NULL,
            to_id TEXT NOT NULL,
            relationship_type TEXT NOT NULL,
            FOREIGN KEY (from_id) REFERENCES person(id),
            FOREIGN KEY (to_id) REFERENCES person(id)
        )
    """)

    conn.commit()
    return conn


def store_tree(conn: sqlite3.Connection, store: RelationshipStore):
    """Replace the stored tree with the contents of ``store``."""
    cursor = conn.cursor()
    cursor.execute("DELETE FROM relationship")
    cursor.execute("DELETE FROM person")

    # Insert persons
    cursor.executemany(
        """
        INSERT INTO person
        (id, name, gender, birth_year, death_year, occupation, birthplace, notes, image_ref)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            (
                p.id,
                p.name,
                p.gender.value,
                p.birth_year,
                p.death_year,
                p.occupation,
                p.birthplace,
                p.notes,
                p.image_ref,
            )
            for p in store.people.values()
        ],
    )

    # Insert relationships
    cursor.executemany(
        """
        INSERT INTO relationship (from_id, to_id, relationship_type)
        VALUES (?, ?, ?)
        """,
        [(e.from_id, e.to_id, e.type.value) for e in store.edges],
    )

    conn.commit()


def load_tree(conn: sqlite3.Connection) -> RelationshipStore:
    """Read the stored tree back into a validated store."""
    cursor = conn.cursor()

    cursor.execute(
        "SELECT id, name, gender, birth_year, death_year, occupation, birthplace, notes, image_ref "
        "FROM person ORDER BY id"
    )
    people = {
        row[0]: Person(
            id=row[0],
            name=row[1],
            gender=Gender(row[2]),
            birth_year=row[3],
            death_year=row[4],
            occupation=row[5],
            birthplace=row[6],
            notes=row[7],
            image_ref=row[8],
        )
        for row in cursor.fetchall()
    }

    cursor.execute("SELECT from_id, to_id, relationship_type FROM relationship ORDER BY id")
    edges = []
    for from_id, to_id, rel in cursor.fetchall():
        type_ = RelationshipType(rel)
        edges.append(RelationshipEdge(from_id, to_id, type_, bidirectional=type_.symmetric))

    return RelationshipStore.from_data(people, edges)
