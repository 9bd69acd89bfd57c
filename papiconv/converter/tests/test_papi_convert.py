"""
Tests for the papi_convert management command and file conversions.
"""

import json
import logging
import os
import shutil
import sqlite3
import tempfile
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, override_settings

from papiconv.converter.conversion import convert, json_to_papi, papi_to_json
from papiconv.converter_core.errors import (
    ConversionError,
    MissingTableError,
    NotAStoreError,
)
from papiconv.converter_core.sqlite_store import open_database


DOCUMENT = {
    "variables": {
        "name": "Championnat de Bretagne",
        "rounds": "5",
        "pairing": "Suisse",
        "venue": "Rennes",
        "bogus": "not a setting",
    },
    "players": [
        {
            "lastName": "Le Gall",
            "firstName": "Yann",
            "birthDate": "02/02/1977",
            "elo": 2105,
            "rounds": {"1": {"color": "B", "opponent": 1, "result": 3}},
        },
        {
            "lastName": "Morvan",
            "firstName": "Gwen",
            "rounds": {
                "1": {"color": "N", "opponent": 0, "result": 1},
                "2": {"result": 6},
            },
        },
    ],
}


class PapiConvertTestCase(SimpleTestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.json_path = os.path.join(self.tmpdir, "tournament.json")
        with open(self.json_path, "w", encoding="utf-8") as f:
            json.dump(DOCUMENT, f)

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def call(self, *args):
        out = StringIO()
        call_command("papi_convert", *args, stdout=out)
        return out.getvalue()

    def test_json_to_papi_default_output(self):
        output = self.call(self.json_path)

        papi_path = os.path.join(self.tmpdir, "tournament.papi")
        self.assertTrue(os.path.exists(papi_path))
        self.assertIn("Conversion completed successfully", output)
        self.assertIn("Skipping invalid variable: bogus", output)
        self.assertIn("4 tournament variables, 2 players", output)
        self.assertIn("1 bye(s)", output)

        with open_database(papi_path) as database:
            exempt = database.table("JOUEUR").find("Ref", 1)
        self.assertEqual(exempt["Rd02Adv"], 3)

    def test_round_trip_through_command(self):
        papi_path = os.path.join(self.tmpdir, "out", "tournament.papi")
        json_out = os.path.join(self.tmpdir, "export", "tournament.json")

        self.call(self.json_path, papi_path)
        self.call(papi_path, json_out)

        with open(json_out, encoding="utf-8") as f:
            exported = json.load(f)

        expected_variables = dict(DOCUMENT["variables"])
        del expected_variables["bogus"]
        self.assertEqual(exported["variables"], expected_variables)
        self.assertEqual(len(exported["players"]), 2)
        self.assertEqual(exported["players"][0]["birthDate"], "02/02/1977")
        self.assertEqual(
            exported["players"][1]["rounds"],
            {"1": {"color": "N", "opponent": 0, "result": 1}, "2": {"result": 6}},
        )

    def test_reimport_replaces_players(self):
        papi_path = os.path.join(self.tmpdir, "tournament.papi")
        self.call(self.json_path, papi_path)

        smaller = {"variables": {"venue": "Brest"}, "players": [{"lastName": "Seul"}]}
        smaller_path = os.path.join(self.tmpdir, "smaller.json")
        with open(smaller_path, "w", encoding="utf-8") as f:
            json.dump(smaller, f)
        self.call(smaller_path, papi_path)

        exported_path, _ = papi_to_json(papi_path)
        with open(exported_path, encoding="utf-8") as f:
            exported = json.load(f)
        self.assertEqual(exported["variables"]["venue"], "Brest")
        self.assertEqual(exported["variables"]["name"], "Championnat de Bretagne")
        self.assertEqual([p["lastName"] for p in exported["players"]], ["Seul"])

    @override_settings(PAPICONV_MAX_VALUE_LENGTH=10)
    def test_max_length_setting(self):
        papi_path, report = json_to_papi(self.json_path)
        with open_database(papi_path) as database:
            name = database.table("INFO").find("Variable", "Nom")["Value"]
        self.assertEqual(name, "Championna")
        self.assertTrue(any("Trimmed" in warning for warning in report.warnings))

    def test_template_copied(self):
        template = os.path.join(self.tmpdir, "template.papi")
        with open_database(template, create=True) as database:
            database.table("INFO").insert(["Arbitre", "From template"])
            database.commit()

        papi_path = os.path.join(self.tmpdir, "from_template.papi")
        with override_settings(PAPICONV_TEMPLATE=template):
            json_to_papi(self.json_path, papi_path)

        _, report = papi_to_json(papi_path)
        exported_path = os.path.join(self.tmpdir, "from_template.json")
        with open(exported_path, encoding="utf-8") as f:
            exported = json.load(f)
        self.assertEqual(exported["variables"]["arbiter"], "From template")
        self.assertEqual(report.players, 2)

    def test_missing_template(self):
        with override_settings(PAPICONV_TEMPLATE=os.path.join(self.tmpdir, "nope.papi")):
            with self.assertRaises(ConversionError):
                json_to_papi(self.json_path)

    def test_existing_file_without_tables(self):
        papi_path = os.path.join(self.tmpdir, "empty.papi")
        connection = sqlite3.connect(papi_path)
        connection.execute("CREATE TABLE other (x)")
        connection.commit()
        connection.close()
        with self.assertRaises(MissingTableError):
            json_to_papi(self.json_path, papi_path)

    def test_file_that_is_not_a_store(self):
        papi_path = os.path.join(self.tmpdir, "access.papi")
        with open(papi_path, "wb") as f:
            f.write(b"\x00\x01\x00\x00Standard Jet DB\x00" + b"\x00" * 4096)

        with self.assertRaises(CommandError) as ctx:
            self.call(papi_path)
        self.assertIn("Not a tournament store", str(ctx.exception))
        with self.assertRaises(NotAStoreError):
            json_to_papi(self.json_path, papi_path)

    def test_verbose_level_restored(self):
        logger = logging.getLogger("papiconv")
        level = logger.level
        self.call(self.json_path, "--verbose")
        self.assertEqual(logger.level, level)

    def test_unsupported_extension(self):
        with self.assertRaises(CommandError):
            self.call(os.path.join(self.tmpdir, "tournament.txt"))
        with self.assertRaises(ConversionError):
            convert("tournament.csv")

    def test_missing_input(self):
        with self.assertRaises(CommandError) as ctx:
            self.call(os.path.join(self.tmpdir, "absent.papi"))
        self.assertIn("not found", str(ctx.exception))

    def test_invalid_json(self):
        broken = os.path.join(self.tmpdir, "broken.json")
        with open(broken, "w", encoding="utf-8") as f:
            f.write("{not json")
        with self.assertRaises(CommandError):
            self.call(broken)

    def test_dangling_opponent(self):
        papi_path = os.path.join(self.tmpdir, "tournament.papi")
        json_to_papi(self.json_path, papi_path)
        with open_database(papi_path) as database:
            database.table("JOUEUR").update("Ref", {"Ref": 2, "Rd03Adv": 40, "Rd03Res": 3})
            database.commit()

        with self.assertRaises(CommandError) as ctx:
            self.call(papi_path)
        self.assertIn("40", str(ctx.exception))
