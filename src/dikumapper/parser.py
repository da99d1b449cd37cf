# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
import logging
import re
from collections.abc import Sequence
from typing import Optional, Union

# Local Modules:
from .roomdata.objects import DIRECTION_ALIASES, DIRECTIONS, normalizeDirection
from .typedef import RePatternType
from .utils import simplified, stripAnsi


BARSOOM_START_MARKER: str = "--<"
BARSOOM_END_MARKER: str = ">--"
BLOCK_LINE_BUDGET: int = 15
COMPACT_EXITS_REGEX: RePatternType = re.compile(r"exits?\s*:\s*(?P<exits>[neswud()]+)\s*>", flags=re.IGNORECASE)
EXITS_REGEXES: tuple[RePatternType, ...] = (
	re.compile(r"^exits?\s*:\s*(?P<exits>.+)$", flags=re.IGNORECASE),
	re.compile(r"^\[\s*exits?\s*:\s*(?P<exits>.+?)\s*\]$", flags=re.IGNORECASE),
	re.compile(r"^obvious\s+exits?\s*:\s*(?P<exits>.+)$", flags=re.IGNORECASE),
)
COMPACT_EXIT_CHARACTERS: frozenset[str] = frozenset("neswud()>")
EXIT_LIST_NOISE_WORDS: frozenset[str] = frozenset(("and", "or", "none"))
EXIT_LIST_PUNCTUATION: str = ".,;:!>[]"
STATUS_LINE_KEYWORDS: tuple[str, ...] = (
	"you feel",
	"you are affected",
	"you nearly",
	"you retch",
	"points a",
	"is lying here",
	"sits here",
	"stands here",
	"plays with",
	"is here",
	"a small",
	"a large",
	"a long",
	"the corpse",
)
NON_TITLE_PREFIXES: tuple[str, ...] = ("you ", "the corpse", "a small", "a large", "a long")
MIN_TITLE_WORDS: int = 2
MAX_TITLE_WORDS: int = 8


logger: logging.Logger = logging.getLogger(__name__)


class RoomInfo(object):
	"""
	A room as extracted from game output.

	The Barsoom indices are the positions of the marker lines in the parsed window, or -1.
	"""

	def __init__(
		self,
		title: str = "",
		description: str = "",
		exits: Optional[Sequence[str]] = None,
	) -> None:
		self.title: str = title
		self.description: str = description
		self.exits: list[str] = list(exits) if exits is not None else []
		self.isBarsoomRoom: bool = False
		self.barsoomStartIndex: int = -1
		self.barsoomEndIndex: int = -1
		self.debugInfo: str = ""

	def __repr__(self) -> str:
		return (
			f"{self.__class__.__name__}(title={self.title!r}, description={self.description!r}, "
			+ f"exits={self.exits!r})"
		)


class _Trace(object):
	"""Collects the decisions made while parsing, if requested."""

	def __init__(self, enabled: bool) -> None:
		self.enabled: bool = enabled
		self.lines: list[str] = []

	def __call__(self, message: str) -> None:
		if self.enabled:
			logger.debug(message)
			self.lines.append(message)

	@property
	def text(self) -> str:
		return "\n".join(self.lines)


def _parseCompactExits(text: str) -> list[str]:
	"""Parses exits written as one letter per direction, with closed doors in parentheses."""
	exits: list[str] = []
	text = text.lower()
	if not COMPACT_EXIT_CHARACTERS.issuperset(text):
		return exits
	for char in text:
		direction: str = DIRECTION_ALIASES.get(char, "")
		if direction and direction not in exits:
			exits.append(direction)
	return exits


def parseExitsList(text: str) -> list[str]:
	"""
	Parses the exits portion of an exits line.

	Args:
		text: The text after 'Exits:', E.G. 'north, south and up' or 'N(S)E>'.

	Returns:
		The full names of the directions, in the order they appeared, without duplicates.
	"""
	text = text.strip()
	if text and " " not in text and "," not in text and not normalizeDirection(text.rstrip(".>")):
		return _parseCompactExits(text)
	exits: list[str] = []
	direction: str
	for word in text.replace(",", " ").split():
		word = word.strip(EXIT_LIST_PUNCTUATION).strip("()").lower()
		if not word or word in EXIT_LIST_NOISE_WORDS:
			continue
		direction = normalizeDirection(word)
		if direction in DIRECTIONS and direction not in exits:
			exits.append(direction)
	return exits


def parseExitsLine(line: str) -> list[str]:
	"""
	Extracts the exits from a line of game output.

	Args:
		line: The line.

	Returns:
		The exits, or an empty list if the line is not an exits line.
	"""
	line = stripAnsi(line).strip()
	compactMatches = list(COMPACT_EXITS_REGEX.finditer(line))
	if compactMatches:
		# A status line may hold more than one prompt. The last one is the most recent.
		return _parseCompactExits(compactMatches[-1].group("exits"))
	for regex in EXITS_REGEXES:
		match = regex.search(line)
		if match is not None:
			return parseExitsList(match.group("exits"))
	return []


def isPromptLine(line: str) -> bool:
	"""Determines if a line is a game prompt, E.G. '25H 100V >'."""
	line = line.strip()
	return line.endswith(">") and "H " in line and "V " in line


def isStatusOrCombatLine(line: str) -> bool:
	"""Determines if a line is status, combat, or object presence text, rather than part of a room."""
	lowered: str = line.strip().lower()
	return any(keyword in lowered for keyword in STATUS_LINE_KEYWORDS)


def isRoomTitle(line: str) -> bool:
	"""Determines if a line looks like a room title."""
	line = line.strip()
	lowered: str = line.lower()
	if not line or lowered.startswith(NON_TITLE_PREFIXES):
		return False
	if not MIN_TITLE_WORDS <= len(line.split()) <= MAX_TITLE_WORDS:
		return False
	return "A" <= line[0] <= "Z"


def detectMovement(command: str) -> str:
	"""
	Determines if a command moves the player.

	Args:
		command: The command sent to the game.

	Returns:
		The full direction name of the movement, or an empty string if the command is not a movement.
	"""
	return normalizeDirection(command)


def parseBarsoomRoom(lines: Sequence[str], debug: bool = False) -> Union[RoomInfo, None]:
	"""
	Extracts a room delimited by Barsoom style marker lines.

	The room is laid out as a '--<' line, the title, the description,
	and a '>--' line that is usually followed by the exits on the same line.

	Args:
		lines: The recently received lines, oldest first.
		debug: Record the parser's decisions in the debugInfo of the result.

	Returns:
		The room, or None if the lines contain no complete Barsoom room.
	"""
	trace: _Trace = _Trace(debug)
	return _parseBarsoomRoom([stripAnsi(line) for line in lines], trace)


def _parseBarsoomRoom(lines: Sequence[str], trace: _Trace) -> Union[RoomInfo, None]:
	endIndex: int = -1
	for index in range(len(lines) - 1, -1, -1):
		if lines[index].strip().startswith(BARSOOM_END_MARKER):
			endIndex = index
			break
	if endIndex < 0:
		trace("No Barsoom end marker found.")
		return None
	startIndex: int = -1
	for index in range(endIndex - 1, -1, -1):
		if lines[index].strip().startswith(BARSOOM_START_MARKER):
			startIndex = index
			break
	if startIndex < 0:
		trace(f"Barsoom end marker at line {endIndex} has no start marker.")
		return None
	trace(f"Barsoom markers found at lines {startIndex} and {endIndex}.")
	body: list[str] = [line.strip() for line in lines[startIndex + 1 : endIndex] if line.strip()]
	if not body:
		trace("Barsoom block is empty.")
		return None
	exits: list[str] = parseExitsLine(lines[endIndex].strip()[len(BARSOOM_END_MARKER) :])
	if exits:
		trace(f"Exits on the end marker line: {', '.join(exits)}.")
	else:
		# Exits printed on their own come after the block, never before it.
		for index in range(endIndex + 1, len(lines)):
			exits = parseExitsLine(lines[index])
			if exits:
				trace(f"Exits found after the end marker at line {index}: {', '.join(exits)}.")
				break
		else:
			trace("No exits found for the Barsoom room.")
	info: RoomInfo = RoomInfo(title=body[0], description=" ".join(body[1:]), exits=exits)
	info.isBarsoomRoom = True
	info.barsoomStartIndex = startIndex
	info.barsoomEndIndex = endIndex
	trace(f"Title: {info.title!r}.")
	return info


def _collectBlock(lines: Sequence[str], exitsIndex: int, trace: _Trace) -> list[tuple[int, str]]:
	"""Walks backward from an exits line, collecting the lines of the room."""
	block: list[tuple[int, str]] = []
	blankCount: int = 0
	for index in range(exitsIndex - 1, max(exitsIndex - BLOCK_LINE_BUDGET, 0) - 1, -1):
		line: str = lines[index]
		if not line.strip():
			blankCount += 1
			if blankCount >= 2:
				trace(f"Stopped at two blank lines ending at line {index}.")
				break
			continue
		blankCount = 0
		if parseExitsLine(line):
			trace(f"Stopped at a previous exits line at line {index}.")
			break
		elif isPromptLine(line):
			trace(f"Stopped at a prompt at line {index}.")
			break
		elif isStatusOrCombatLine(line):
			trace(f"Skipped status line {index}: {line.strip()!r}.")
			continue
		block.append((index, line))
	block.reverse()
	return block


def _findTitle(block: Sequence[tuple[int, str]], trace: _Trace) -> int:
	"""Returns the position of the title in the block."""
	candidates: list[int] = [position for position, (_, line) in enumerate(block) if isRoomTitle(line)]
	for position in candidates:
		# Descriptions are commonly indented under the title.
		if position + 1 < len(block) and block[position + 1][1][:1].isspace():
			trace(f"Title {block[position][1].strip()!r} is followed by an indented description.")
			return position
	if candidates:
		trace(f"Title {block[candidates[0]][1].strip()!r} chosen by heuristic.")
		return candidates[0]
	trace(f"No line looks like a title, using {block[0][1].strip()!r}.")
	return 0


def parseRoomInfo(lines: Sequence[str], debug: bool = False) -> Union[RoomInfo, None]:
	"""
	Extracts the most recent room from a window of game output.

	Args:
		lines: The recently received lines, oldest first.
		debug: Record the parser's decisions in the debugInfo of the result.

	Returns:
		The room, or None if no room could be found with confidence.
	"""
	trace: _Trace = _Trace(debug)
	lines = [stripAnsi(line) for line in lines]
	info: Union[RoomInfo, None] = _parseBarsoomRoom(lines, trace)
	if info is not None:
		info.debugInfo = trace.text
		return info
	exitsIndex: int = -1
	exits: list[str] = []
	for index in range(len(lines) - 1, -1, -1):
		exits = parseExitsLine(lines[index])
		if exits:
			exitsIndex = index
			break
	if exitsIndex < 0:
		trace("No exits line found.")
		return None
	trace(f"Exits line {exitsIndex}: {', '.join(exits)}.")
	block: list[tuple[int, str]] = _collectBlock(lines, exitsIndex, trace)
	if not block:
		trace("No room text before the exits line.")
		return None
	titlePosition: int = _findTitle(block, trace)
	title: str = simplified(block[titlePosition][1])
	description: str = " ".join(simplified(line) for _, line in block[titlePosition + 1 :])
	info = RoomInfo(title=title, description=description, exits=exits)
	info.debugInfo = trace.text
	return info
