"""
File-level conversions between JSON documents and tournament store files.
"""

import json
import logging
import os
import shutil
from typing import Optional, Tuple

from django.conf import settings

from papiconv.converter_core.assembler import DocumentAssembler
from papiconv.converter_core.errors import ConversionError
from papiconv.converter_core.report import ConversionReport
from papiconv.converter_core.sqlite_store import open_database
from papiconv.converter_core.variables import VariableTranslator

logger = logging.getLogger(__name__)

JSON_EXTENSIONS = (".json",)
STORE_EXTENSIONS = (".papi", ".mdb", ".sqlite")


def _assembler() -> DocumentAssembler:
    max_length = getattr(settings, "PAPICONV_MAX_VALUE_LENGTH", None)
    if max_length is None:
        return DocumentAssembler()
    return DocumentAssembler(VariableTranslator(max_length=max_length))


def _replace_extension(path: str, extension: str) -> str:
    return os.path.splitext(path)[0] + extension


def _ensure_parent_dir(path: str):
    parent = os.path.dirname(os.path.abspath(path))
    if not os.path.isdir(parent):
        os.makedirs(parent)
        logger.info("Created directory: %s", parent)


def json_to_papi(
    json_path: str, papi_path: Optional[str] = None
) -> Tuple[str, ConversionReport]:
    """Import the document at ``json_path`` into a tournament store.

    Args:
        json_path: Input JSON document
        papi_path: Output store (default: input path with a ``.papi`` extension)

    Returns:
        Tuple of (output path, conversion report)
    """
    papi_path = papi_path or _replace_extension(json_path, ".papi")

    try:
        with open(json_path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except OSError as e:
        raise ConversionError(f"Error reading JSON file: {e}") from e
    except json.JSONDecodeError as e:
        raise ConversionError(f"Invalid JSON in {json_path}: {e}") from e
    logger.info("Reading JSON from: %s", json_path)

    _ensure_parent_dir(papi_path)

    template = getattr(settings, "PAPICONV_TEMPLATE", None)
    if template:
        if not os.path.exists(template):
            raise ConversionError(f"Template file not found: {template}")
        logger.info("Copying template file: %s", template)
        shutil.copyfile(template, papi_path)
    create = not template and not os.path.exists(papi_path)

    with open_database(papi_path, create=create) as database:
        report = _assembler().import_document(document, database)

    return papi_path, report


def papi_to_json(
    papi_path: str, json_path: Optional[str] = None
) -> Tuple[str, ConversionReport]:
    """Export the tournament store at ``papi_path`` to a JSON document.

    Args:
        papi_path: Input store
        json_path: Output document (default: input path with a ``.json`` extension)

    Returns:
        Tuple of (output path, conversion report)
    """
    json_path = json_path or _replace_extension(papi_path, ".json")

    if not os.path.exists(papi_path):
        raise ConversionError(f"Tournament file not found: {papi_path}")
    logger.info("Reading tournament file from: %s", papi_path)

    report = ConversionReport()
    with open_database(papi_path) as database:
        document = _assembler().export_document(database, report)

    _ensure_parent_dir(json_path)
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2, ensure_ascii=False)
        f.write("\n")

    return json_path, report


def convert(
    input_path: str, output_path: Optional[str] = None
) -> Tuple[str, ConversionReport]:
    """Convert in whichever direction the input extension calls for."""
    extension = os.path.splitext(input_path)[1].lower()
    if extension in JSON_EXTENSIONS:
        return json_to_papi(input_path, output_path)
    if extension in STORE_EXTENSIONS:
        return papi_to_json(input_path, output_path)
    raise ConversionError(
        f"Input file must be one of: {', '.join(JSON_EXTENSIONS + STORE_EXTENSIONS)}"
    )
