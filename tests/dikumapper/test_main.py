# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
import io
import logging
import os.path
import tempfile
from unittest import TestCase
from unittest.mock import Mock, patch

# Mapper Modules:
from dikumapper.main import ArgumentParser, getCommands, main, transcriptEvents
from dikumapper.mapper import Mapper


TRANSCRIPT: str = "\n".join(
	(
		"Welcome!",
		"> south",
		"Room A",
		"   The first room.",
		"Exits: south.",
		"25H 100V >",
		"> s",
		"Room B",
		"   The second room.",
		"Exits: north.",
		"25H 100V >",
	)
)


class TestMain(TestCase):
	def setUp(self) -> None:
		logging.disable(logging.CRITICAL)

	def tearDown(self) -> None:
		logging.disable(logging.NOTSET)

	def test_transcriptEvents(self) -> None:
		self.assertEqual(
			list(transcriptEvents(["Welcome!\r\n", "> look\n", ">not input\n"])),
			[("line", "Welcome!"), ("userInput", "look"), ("line", ">not input")],
		)

	def test_getCommands(self) -> None:
		args: ArgumentParser = ArgumentParser(underscores_to_dashes=True).parse_args([])
		self.assertEqual(getCommands(args), [])
		args = ArgumentParser(underscores_to_dashes=True).parse_args(
			["--find", "temple", "--path", "#3", "--nearby", "2", "--legend", "--width", "20", "--height", "9"]
		)
		self.assertEqual(getCommands(args), ["rooms temple", "path #3", "nearby 2", "legend", "map 20 9"])
		args = ArgumentParser(underscores_to_dashes=True).parse_args(["--render"])
		self.assertEqual(getCommands(args), ["map"])

	@patch.object(Mapper, "output")
	def test_main_replaysTranscript(self, mockOutput: Mock) -> None:
		with tempfile.TemporaryDirectory() as tempDir:
			mapPath: str = os.path.join(tempDir, "map.json")
			mapper: Mapper = main(mapPath, io.StringIO(TRANSCRIPT), ["rinfo", "savemap"])
			self.assertFalse(mapper.is_alive())
			self.assertEqual(sorted(room.title for room in mapper.rooms.values()), ["Room A", "Room B"])
			self.assertEqual(mapper.currentRoomID, mapper.roomNumbering[1])
			output: list[str] = [args[0] for args, _ in mockOutput.call_args_list]
			self.assertTrue(any(text.startswith("Room number: 2\n") for text in output))
			self.assertEqual(output[-1], "Map saved.")
			# The saved map is loaded on the next run.
			mapper = main(mapPath)
			self.assertEqual(len(mapper.rooms), 2)
			self.assertEqual(mapper.currentRoomID, mapper.roomNumbering[1])
