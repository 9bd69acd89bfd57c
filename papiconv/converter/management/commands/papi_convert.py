"""
Django management command converting between JSON documents and PAPI files.

The direction follows the input extension: ``.json`` is imported into a
tournament file, ``.papi``/``.mdb``/``.sqlite`` is exported to JSON.
"""

import logging

from django.core.management.base import BaseCommand, CommandError

from papiconv.converter.conversion import convert
from papiconv.converter_core.errors import ConversionError


class Command(BaseCommand):
    help = "Convert a tournament between JSON and PAPI format"

    def add_arguments(self, parser):
        parser.add_argument("input_file", type=str, help="JSON document or PAPI file to convert")
        parser.add_argument(
            "output_file",
            nargs="?",
            type=str,
            help="Output path (default: input path with the other extension)",
        )
        parser.add_argument(
            "--verbose",
            action="store_true",
            help="Log each setting and player as it is converted",
        )

    def handle(self, *args, **options):
        logger = logging.getLogger("papiconv")
        previous_level = logger.level
        if options["verbose"] or options["verbosity"] > 1:
            logger.setLevel(logging.DEBUG)
        try:
            self.run_conversion(options)
        finally:
            logger.setLevel(previous_level)

    def run_conversion(self, options):
        input_file = options["input_file"]
        self.stdout.write(f"Converting {input_file}...")

        try:
            output_file, report = convert(input_file, options.get("output_file"))
        except ConversionError as e:
            raise CommandError(str(e))

        for warning in report.warnings:
            self.stdout.write(self.style.WARNING(f"  Warning: {warning}"))

        self.stdout.write(
            f"{report.settings} tournament variables, {report.players} players"
        )
        if report.byes:
            self.stdout.write(f"{report.byes} bye(s) paired against EXEMPT")
        self.stdout.write(f"Output file: {output_file}")
        self.stdout.write(self.style.SUCCESS("Conversion completed successfully!"))
