# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
import inspect
import os
import os.path
import re
import textwrap
from collections.abc import Callable
from typing import Any, Union

# Local Modules:
from .typedef import RePatternType


ANSI_COLOR_REGEX: RePatternType = re.compile(r"\x1b\[[0-9;]*[a-zA-Z]")
WHITE_SPACE_REGEX: RePatternType = re.compile(r"\s+", flags=re.UNICODE)
DATA_DIRECTORY_ENVIRONMENT_VARIABLE: str = "DIKUMAPPER_DATA_DIR"
DEFAULT_DATA_DIRECTORY: tuple[str, ...] = ("~", ".config", "dikumapper")


def stripAnsi(text: str) -> str:
	"""
	Strips ANSI escape sequences from text.

	Args:
		text: The text to strip ANSI sequences from.

	Returns:
		The text with ANSI escape sequences stripped.
	"""
	return ANSI_COLOR_REGEX.sub("", text)


def simplified(text: str) -> str:
	"""
	Replaces one or more consecutive white space characters with a single space.

	Args:
		text: The text to process.

	Returns:
		The simplified version of the text.
	"""
	return WHITE_SPACE_REGEX.sub(" ", text).strip()


def getDataPath(*args: str) -> str:
	"""
	Retrieves the path of the data directory.

	The directory is taken from the DIKUMAPPER_DATA_DIR environment variable if it is set,
	otherwise ~/.config/dikumapper is used.

	Args:
		*args: Positional arguments to be passed to os.join after the data path.

	Returns:
		The path.
	"""
	path: str = os.environ.get(DATA_DIRECTORY_ENVIRONMENT_VARIABLE, "").strip()
	if not path:
		path = os.path.expanduser(os.path.join(*DEFAULT_DATA_DIRECTORY))
	return os.path.realpath(os.path.join(path, *args))


def ensureDirectory(path: str) -> str:
	"""Creates the directory if it doesn't exist, and returns the path."""
	os.makedirs(path, exist_ok=True)
	return path


def formatDocString(functionOrString: Union[str, Callable[..., Any]], width: int = 79, prefix: str = "") -> str:
	"""
	Formats a docstring for displaying.

	Args:
		functionOrString: The function containing the docstring, or the docstring its self.
		width: The number of characters to word wrap each line to.
		prefix: One or more characters to use for indention.

	Returns:
		The formatted docstring.
	"""
	if callable(functionOrString):  # It's a function.
		docString = getattr(functionOrString, "__doc__", None) or ""
	else:  # It's a string.
		docString = functionOrString
	paragraphs: list[str] = []
	for paragraph in inspect.cleandoc(docString).split("\n\n"):
		paragraphs.append(
			textwrap.fill(
				simplified(paragraph),
				width=width,
				initial_indent=prefix,
				subsequent_indent=prefix,
				break_long_words=False,
				break_on_hyphens=False,
			)
		)
	return "\n".join(item for item in paragraphs if item.strip())
