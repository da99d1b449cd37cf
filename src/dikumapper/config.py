# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
import json
import os.path
import threading
from collections.abc import Iterator
from typing import Any, MutableMapping

# Local Modules:
from .utils import ensureDirectory, getDataPath


DATA_DIRECTORY: str = getDataPath()
DEFAULT_CONFIG: dict[str, Any] = {
	"autoSave": True,
	"mapDebug": False,
	"mapHeight": 15,
	"mapWidth": 40,
	"nearbyDistance": 5,
}


class ConfigError(Exception):
	"""Implements the base class for Config exceptions."""


class Config(MutableMapping[str, Any]):
	"""
	Implements loading and saving of program configuration.

	Values in the user's configuration override those in the sample configuration.
	The typed getters fall back to DEFAULT_CONFIG.
	"""

	_configLock: threading.RLock = threading.RLock()

	def __init__(self, name: str = "config") -> None:
		"""
		Defines the constructor for the object.

		Args:
			name: The name of the configuration.
		"""
		super().__init__()
		self._name: str = name
		self._config: dict[str, Any] = dict()
		self.reload()

	@property
	def name(self) -> str:
		"""The name of the configuration."""
		return self._name

	def _parse(self, filename: str) -> dict[str, Any]:
		filename = os.path.join(DATA_DIRECTORY, filename)
		if not os.path.exists(filename):
			return {}
		elif os.path.isdir(filename):
			raise ConfigError(f"'{filename}' is a directory, not a file.")
		with self._configLock:
			try:
				with open(filename, "r", encoding="utf-8") as fileObj:
					return dict(json.load(fileObj))
			except IOError as e:  # pragma: no cover
				raise ConfigError(f"{e.strerror}: '{e.filename}'")
			except ValueError:
				raise ConfigError(f"Corrupted json file: {filename}")

	def reload(self) -> None:
		"""Reloads the configuration from disc."""
		self._config.clear()
		self._config.update(self._parse(f"{self.name}.json.sample"))
		self._config.update(self._parse(f"{self.name}.json"))

	def save(self) -> None:
		"""Saves the configuration to disc."""
		filename: str = os.path.join(DATA_DIRECTORY, f"{self.name}.json")
		with self._configLock:
			ensureDirectory(DATA_DIRECTORY)
			with open(filename, "w", encoding="utf-8") as fileObj:
				json.dump(self._config, fileObj, sort_keys=True, indent=2)

	def getInt(self, key: str) -> int:
		"""
		Retrieves an integer setting, falling back to the default if the stored value is not an integer.

		Args:
			key: The name of the setting.

		Returns:
			The value.
		"""
		value: Any = self.get(key, DEFAULT_CONFIG.get(key, 0))
		if isinstance(value, bool) or not isinstance(value, int):
			return int(DEFAULT_CONFIG.get(key, 0))
		return value

	def getBool(self, key: str) -> bool:
		"""Retrieves a boolean setting, falling back to the default."""
		return bool(self.get(key, DEFAULT_CONFIG.get(key, False)))

	def __getitem__(self, key: str) -> Any:
		return self._config[key]

	def __setitem__(self, key: str, value: Any) -> None:
		self._config[key] = value

	def __delitem__(self, key: str) -> None:
		del self._config[key]

	def __iter__(self) -> Iterator[str]:
		return iter(self._config)

	def __len__(self) -> int:
		return len(self._config)
