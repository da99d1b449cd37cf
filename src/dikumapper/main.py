# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
import logging
import sys
import traceback
from collections.abc import Iterable
from typing import Optional, TextIO

# Third-party Modules:
from tap import Tap

# Local Modules:
from . import MUD_DATA, USER_DATA, __version__
from .mapper import Mapper
from .roomdata.database import getMapPath
from .typedef import MAPPER_QUEUE_EVENT_TYPE


USER_INPUT_PREFIX: str = "> "


logger: logging.Logger = logging.getLogger(__name__)


class ArgumentParser(Tap):
	map_file: str = ""
	"""The map file to use. Defaults to a file named after the host and port in the data directory."""
	host: str = "localhost"
	"""The host name of the game server, used to name the map file."""
	port: int = 4000
	"""The port of the game server, used to name the map file."""
	replay: str = ""
	"""
	A session transcript to feed to the mapper, or - for standard input.
	Lines beginning with '> ' are user input, all other lines are game output.
	"""
	render: bool = False
	"""Print the map around the current room."""
	legend: bool = False
	"""Number the rooms on the printed map."""
	width: int = 0
	"""The width of the printed map. Defaults to the configured width."""
	height: int = 0
	"""The height of the printed map. Defaults to the configured height."""
	nearby: int = -1
	"""List the rooms within this many moves of the current room."""
	path: str = ""
	"""Print the route to a room, given its number or search terms."""
	find: str = ""
	"""Search for rooms by title, first sentence, and exits."""
	debug: bool = False
	"""Print room detection details."""

	def configure(self) -> None:
		version: str = (
			f"%(prog)s v{__version__} "
			+ f"(Python {'.'.join(str(i) for i in sys.version_info[:3])} {sys.version_info.releaselevel})"
		)
		self.add_argument(
			"-v",
			"--version",
			help="Print the program version as well as the Python version.",
			action="version",
			version=version,
		)
		self.add_argument("-m", "--map_file", metavar="file")
		self.add_argument("-H", "--host", metavar="address")
		self.add_argument("-p", "--port", metavar="port")
		self.add_argument("-r", "--replay", metavar="file")
		self.add_argument("-R", "--render")
		self.add_argument("-l", "--legend")
		self.add_argument("-W", "--width", metavar="columns")
		self.add_argument("-ht", "--height", metavar="rows")
		self.add_argument("-n", "--nearby", metavar="moves")
		self.add_argument("-P", "--path", metavar="room")
		self.add_argument("-f", "--find", metavar="terms")
		self.add_argument("-d", "--debug")


def transcriptEvents(lines: Iterable[str]) -> Iterable[MAPPER_QUEUE_EVENT_TYPE]:
	"""
	Converts the lines of a session transcript into mapper events.

	Args:
		lines: The lines of the transcript.

	Yields:
		The events.
	"""
	for line in lines:
		line = line.rstrip("\r\n")
		if line.startswith(USER_INPUT_PREFIX):
			yield USER_DATA, line[len(USER_INPUT_PREFIX) :]
		else:
			yield MUD_DATA, line


def main(
	mapPath: str,
	transcript: Optional[TextIO] = None,
	commands: Iterable[str] = (),
	isDebugging: bool = False,
) -> Mapper:
	mapperThread: Mapper = Mapper(mapPath=mapPath)
	if isDebugging:
		mapperThread.isDebugging = True
	mapperThread.start()
	if transcript is not None:
		for event in transcriptEvents(transcript):
			mapperThread.queue.put(event)
	for command in commands:
		mapperThread.queue.put((USER_DATA, command))
	mapperThread.queue.put(None)
	mapperThread.join()
	return mapperThread


def getCommands(args: ArgumentParser) -> list[str]:
	"""Builds the mapper commands requested on the command line."""
	commands: list[str] = []
	if args.find:
		commands.append(f"rooms {args.find}")
	if args.path:
		commands.append(f"path {args.path}")
	if args.nearby >= 0:
		commands.append(f"nearby {args.nearby}")
	if args.legend:
		commands.append("legend")
	if args.render or args.legend:
		sizes: str = ""
		if args.width > 0:
			sizes = f"{args.width} {args.height}" if args.height > 0 else f"{args.width}"
		elif args.height > 0:
			logger.warning("A map height was given without a width. Using the configured size.")
		commands.append(f"map {sizes}".strip())
	return commands


def run() -> None:
	parser: ArgumentParser = ArgumentParser(
		underscores_to_dashes=True, description="A mapper for DikuMUD derived games."
	)
	args: ArgumentParser = parser.parse_args()
	mapPath: str = args.map_file or getMapPath(args.host, args.port)
	try:
		logging.info("Initializing")  # NOQA: LOG015
		if args.replay == "-":
			main(mapPath, sys.stdin, getCommands(args), args.debug)
		elif args.replay:
			with open(args.replay, "r", encoding="utf-8", errors="replace") as fileObj:
				main(mapPath, fileObj, getCommands(args), args.debug)
		else:
			main(mapPath, None, getCommands(args), args.debug)
	except Exception:
		traceback.print_exc()
		logging.exception("OOPS!")  # NOQA: LOG015
	finally:
		logging.info("Shutting down.")  # NOQA: LOG015
		logging.shutdown()
