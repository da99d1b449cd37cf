# Copyright (c) 2025 Nick Stockton and contributors
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

# Future Modules:
from __future__ import annotations

# Built-in Modules:
import logging
import os.path
import re
from collections.abc import Callable, Mapping
from functools import lru_cache
from typing import Any, Union

# Third-party Modules:
import fastjsonschema
import orjson

# Local Modules:
from ..typedef import RePatternType
from ..utils import ensureDirectory, getDataPath


MAP_SCHEMA_VERSION: int = 1  # Increment this when the map schema changes.
MAPS_DIRECTORY: str = "maps"
SCHEMA_DIRECTORY: str = os.path.dirname(os.path.abspath(__file__))
UNSAFE_FILE_NAME_REGEX: RePatternType = re.compile(r"[^A-Za-z0-9_.-]+")


logger: logging.Logger = logging.getLogger(__name__)


class MapDatabaseError(Exception):
	"""Implements the base class for map database exceptions."""


class SchemaValidationError(MapDatabaseError):
	"""Raised when a map database fails validation against its schema."""


def getMapPath(host: str, port: int) -> str:
	"""
	Determines the path of the map file for a game server.

	Args:
		host: The host name of the game server.
		port: The port of the game server.

	Returns:
		The map file path.
	"""
	host = UNSAFE_FILE_NAME_REGEX.sub("_", host.strip().lower()) or "localhost"
	return os.path.join(getDataPath(MAPS_DIRECTORY), f"{host}_{port}.json")


def getSchemaPath(schemaVersion: int) -> str:
	"""
	Determines the schema file path from a schema version.

	Args:
		schemaVersion: The schema version.

	Returns:
		The schema file path.
	"""
	return os.path.join(SCHEMA_DIRECTORY, f"map_v{schemaVersion}.schema")


@lru_cache(maxsize=None)
def getValidator(schemaPath: str) -> Callable[..., None]:  # type: ignore[misc]
	with open(schemaPath, "rb") as fileObj:
		validator: Callable[..., None] = fastjsonschema.compile(orjson.loads(fileObj.read()))
	return validator


def _validate(database: Mapping[str, Any], schemaPath: str) -> None:
	"""
	Validates a database against a schema.

	Args:
		database: The database to be validated.
		schemaPath: The location of the schema.

	Raises:
		SchemaValidationError: The database is invalid.
	"""
	validator = getValidator(schemaPath)
	try:
		validator(database)
	except fastjsonschema.JsonSchemaException as e:
		raise SchemaValidationError(f"Data failed validation: {e}") from e


def _load(databasePath: str) -> Union[tuple[str, None, int], tuple[None, dict[str, Any], int]]:
	"""
	Loads a database into memory.

	Args:
		databasePath: The location of the database.

	Returns:
		An error message or None, the loaded database or None, and the schema version.
	"""
	if not os.path.exists(databasePath):
		return f"Error: '{databasePath}' doesn't exist.", None, 0
	if os.path.isdir(databasePath):
		return f"Error: '{databasePath}' is a directory, not a file.", None, 0
	try:
		with open(databasePath, "rb") as fileObj:
			database: dict[str, Any] = orjson.loads(fileObj.read())
		if not isinstance(database, dict):
			return f"Error: '{databasePath}' does not contain a map.", None, 0
		schemaVersion: int = database.get("schema_version", 0)
		if not isinstance(schemaVersion, int) or not 0 <= schemaVersion <= MAP_SCHEMA_VERSION:
			return f"Error: '{databasePath}' has unsupported schema version {schemaVersion!r}.", None, 0
		_validate(database, getSchemaPath(schemaVersion))
		database.pop("schema_version", None)
		return None, database, schemaVersion
	except IOError as e:
		return f"IOError: {e}", None, 0
	except orjson.JSONDecodeError as e:
		return f"Error: '{databasePath}' is corrupted. {e}", None, 0
	except SchemaValidationError as e:
		return f"Error: '{databasePath}' is invalid. {e}", None, 0


def _dump(database: Mapping[str, Any], databasePath: str, schemaPath: str) -> None:
	"""
	Saves a database to disk.

	The database is fully encoded before the file is opened, so an encoding error leaves the file untouched.

	Args:
		database: The database to be saved.
		databasePath: The location where the database should be saved.
		schemaPath: The location of the schema.

	Raises:
		MapDatabaseError: The database could not be validated, encoded, or written.
	"""
	_validate(database, schemaPath)
	options: int = (
		orjson.OPT_APPEND_NEWLINE | orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS | orjson.OPT_STRICT_INTEGER
	)
	try:
		data: bytes = orjson.dumps(database, option=options)
	except orjson.JSONEncodeError as e:
		logger.exception(f"Error: Cannot encode to '{databasePath}'. {e}")
		raise MapDatabaseError(f"Cannot encode to '{databasePath}'. {e}") from e
	try:
		ensureDirectory(os.path.dirname(os.path.abspath(databasePath)))
		with open(databasePath, "wb") as fileObj:
			fileObj.write(data)
	except IOError as e:
		logger.exception(f"IOError: {e}")
		raise MapDatabaseError(f"Cannot write '{databasePath}'. {e}") from e


def loadRooms(databasePath: str) -> Union[tuple[str, None, int], tuple[None, dict[str, Any], int]]:
	"""
	Loads the rooms database into memory.

	Args:
		databasePath: The location of the map file.

	Returns:
		An error message or None, the rooms database or None, and the schema version.
	"""
	errors, result, schemaVersion = _load(databasePath)
	if result is None:
		return f"While loading map: {errors}", None, 0
	return None, result, schemaVersion


def dumpRooms(database: Mapping[str, Any], databasePath: str) -> None:
	"""
	Saves the rooms database to disk.

	Args:
		database: The rooms database to be saved.
		databasePath: The location of the map file.
	"""
	output: dict[str, Any] = dict(database)  # Shallow copy.
	output["schema_version"] = MAP_SCHEMA_VERSION
	_dump(output, databasePath, getSchemaPath(MAP_SCHEMA_VERSION))
