# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
import logging
from typing import Union

# Local Modules:
from .config import DATA_DIRECTORY, Config
from .utils import ensureDirectory, getDataPath


__version__: str = "0.1.0"


USER_DATA: str = "userInput"
MUD_DATA: str = "line"


cfg: Config = Config()


def levelName(level: Union[str, int, None]) -> str:
	level = level.strip().upper() if isinstance(level, str) else level
	if isinstance(level, int):
		if level < 0 or level > 50:
			return str(logging.getLevelName(0))
		elif level <= 5:
			return str(logging.getLevelName(level * 10))
		else:
			return str(logging.getLevelName(level - level % 10))
	elif level is None or not isinstance(logging.getLevelName(level), int):
		return str(logging.getLevelName(0))
	return level


loggingLevel: str = levelName(cfg.get("logging_level"))

ensureDirectory(DATA_DIRECTORY)
logFile = logging.FileHandler(getDataPath("debug.log"), mode="a", encoding="utf-8", delay=True)
logFile.setLevel(loggingLevel)
formatter = logging.Formatter(
	'{levelname}: from {name} in {threadName}: "{message}" @ {asctime}.{msecs:0f}',
	datefmt="%m/%d/%Y %H:%M:%S",
	style="{",
)
logFile.setFormatter(formatter)

# Define a Handler which writes INFO messages or higher to sys.stderr.
console = logging.StreamHandler()
console.setLevel(logging.INFO)
formatter = logging.Formatter('{levelname}: from {name} in {threadName}: "{message}"', style="{")
console.setFormatter(formatter)

logging.basicConfig(level=logging.getLevelName(0), handlers=[logFile, console])
