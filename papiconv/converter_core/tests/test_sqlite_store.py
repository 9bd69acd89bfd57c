"""
Tests for the SQLite tournament store, including a full round trip.
"""

import os
import sqlite3
import tempfile
import unittest
from datetime import date

from papiconv.converter_core.assembler import DocumentAssembler
from papiconv.converter_core.errors import MissingTableError, NotAStoreError
from papiconv.converter_core.schema import PLAYER_COLUMNS
from papiconv.converter_core.sqlite_store import SqliteDatabase, open_database


class TestSqliteStore(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "tournament.papi")

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_blank_tournament(self):
        with open_database(self.path, create=True) as database:
            self.assertTrue(database.has_table("INFO"))
            self.assertTrue(database.has_table("JOUEUR"))
            table = database.table("JOUEUR")
            self.assertEqual(table.columns, PLAYER_COLUMNS)
            rows = list(table)

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["Ref"], 1)
        self.assertEqual(rows[0]["Nom"], "EXEMPT")
        self.assertEqual(rows[0]["Rd12Cl"], "R")

    def test_create_schema_twice(self):
        with open_database(self.path, create=True):
            pass
        with open_database(self.path, create=True) as database:
            self.assertEqual(len(list(database.table("JOUEUR"))), 1)

    def test_missing_table(self):
        with open_database(self.path) as database:
            with self.assertRaises(MissingTableError):
                database.table("JOUEUR")

    def test_not_a_store(self):
        with open(self.path, "wb") as f:
            f.write(b"Standard Jet DB" + b"\x00" * 2048)
        with self.assertRaises(NotAStoreError):
            open_database(self.path)
        with self.assertRaises(NotAStoreError):
            open_database(self.path, create=True)

    def test_update_and_delete(self):
        with open_database(self.path, create=True) as database:
            info = database.table("INFO")
            info.insert(["Nom", "Open"])
            info.update("Variable", {"Variable": "Nom", "Value": "Closed"})
            self.assertEqual(info.find("Variable", "Nom")["Value"], "Closed")

            info.delete("Variable", ["Nom"])
            self.assertEqual(list(info), [])

    def test_uncommitted_work_discarded(self):
        with open_database(self.path, create=True) as database:
            database.table("INFO").insert(["Nom", "Open"])

        with open_database(self.path) as database:
            self.assertEqual(list(database.table("INFO")), [])

    def test_closed_on_error(self):
        database = open_database(self.path, create=True)
        with self.assertRaises(RuntimeError):
            with database:
                raise RuntimeError("boom")
        with self.assertRaises(sqlite3.ProgrammingError):
            database.table_names()

    def test_round_trip(self):
        document = {
            "variables": {"name": "Open de Lyon", "startDate": "01/05/2024"},
            "players": [
                {
                    "lastName": "Durand",
                    "firstName": "Léa",
                    "birthDate": "14/07/2005",
                    "elo": 1720,
                    "postalCode": "01000",
                    "checkedIn": True,
                    "rounds": {
                        "1": {"color": "B", "opponent": 1, "result": 2},
                        "2": {"result": 6},
                    },
                },
                {
                    "lastName": "Martin",
                    "checkedIn": False,
                    "rounds": {"1": {"color": "N", "opponent": 0, "result": 2}},
                },
            ],
        }
        assembler = DocumentAssembler()

        with open_database(self.path, create=True) as database:
            assembler.import_document(document, database)

        with SqliteDatabase(self.path) as database:
            exempt = database.table("JOUEUR").find("Ref", 1)
            self.assertEqual(exempt["Rd02Adv"], 2)
            self.assertEqual(exempt["Rd02Cl"], "N")
            self.assertEqual(database.table("JOUEUR").find("Ref", 2)["NeLe"], date(2005, 7, 14))
            exported = assembler.export_document(database)

        self.assertEqual(exported["variables"], document["variables"])
        first, second = exported["players"]
        self.assertEqual(first["firstName"], "Léa")
        self.assertEqual(first["birthDate"], "14/07/2005")
        self.assertEqual(first["elo"], 1720)
        self.assertEqual(first["postalCode"], "01000")
        self.assertIs(first["checkedIn"], True)
        self.assertEqual(
            first["rounds"],
            {"1": {"color": "B", "opponent": 1, "result": 2}, "2": {"result": 6}},
        )
        self.assertIs(second["checkedIn"], False)
        self.assertEqual(
            second["rounds"], {"1": {"color": "N", "opponent": 0, "result": 2}}
        )


if __name__ == "__main__":
    unittest.main()
