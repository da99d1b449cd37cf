# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
import os
import os.path
import tempfile
from unittest import TestCase
from unittest.mock import patch

# Mapper Modules:
from dikumapper import utils


class TestUtils(TestCase):
	def test_stripAnsi(self) -> None:
		self.assertEqual(utils.stripAnsi("\x1b[1;32mThe Temple\x1b[0m"), "The Temple")
		self.assertEqual(utils.stripAnsi("No color"), "No color")

	def test_simplified(self) -> None:
		self.assertEqual(utils.simplified("  A   dark\t\troom.\n "), "A dark room.")

	def test_getDataPath(self) -> None:
		subdirectory: tuple[str, ...] = ("level1", "level2")
		with tempfile.TemporaryDirectory() as tempDir:
			with patch.dict(os.environ, {utils.DATA_DIRECTORY_ENVIRONMENT_VARIABLE: tempDir}):
				self.assertEqual(
					utils.getDataPath(*subdirectory), os.path.realpath(os.path.join(tempDir, *subdirectory))
				)
		with patch.dict(os.environ, {utils.DATA_DIRECTORY_ENVIRONMENT_VARIABLE: ""}):
			self.assertEqual(
				utils.getDataPath(),
				os.path.realpath(os.path.expanduser(os.path.join("~", ".config", "dikumapper"))),
			)

	def test_ensureDirectory(self) -> None:
		with tempfile.TemporaryDirectory() as tempDir:
			path: str = os.path.join(tempDir, "a", "b")
			self.assertEqual(utils.ensureDirectory(path), path)
			self.assertTrue(os.path.isdir(path))
			# Existing directories are left alone.
			utils.ensureDirectory(path)

	def test_formatDocString(self) -> None:
		docString: str = """
			First line
			continues here.

			Second paragraph.
		"""
		self.assertEqual(
			utils.formatDocString(docString, width=20, prefix="  "),
			"  First line\n  continues here.\n  Second paragraph.",
		)

		def function() -> None:
			"""Does nothing."""

		self.assertEqual(utils.formatDocString(function), "Does nothing.")
		self.assertEqual(utils.formatDocString(lambda: None), "")
