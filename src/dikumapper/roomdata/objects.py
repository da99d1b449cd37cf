# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
import re
from collections.abc import Iterable, Sequence
from typing import Optional, Union

# Local Modules:
from ..typedef import RePatternType


DIRECTIONS: tuple[str, ...] = (
	"north",
	"south",
	"east",
	"west",
	"up",
	"down",
	"northeast",
	"northwest",
	"southeast",
	"southwest",
)
DIRECTION_ALIASES: dict[str, str] = {
	"n": "north",
	"s": "south",
	"e": "east",
	"w": "west",
	"u": "up",
	"d": "down",
	"ne": "northeast",
	"nw": "northwest",
	"se": "southeast",
	"sw": "southwest",
}
DIRECTION_ABBREVIATIONS: dict[str, str] = {direction: alias for alias, direction in DIRECTION_ALIASES.items()}
REVERSE_DIRECTIONS: dict[str, str] = {
	"north": "south",
	"south": "north",
	"east": "west",
	"west": "east",
	"up": "down",
	"down": "up",
	"northeast": "southwest",
	"southwest": "northeast",
	"northwest": "southeast",
	"southeast": "northwest",
	"ne": "sw",
	"sw": "ne",
	"nw": "se",
	"se": "nw",
}
# Short aliases share the rank of the direction they stand for.
DIRECTION_PRIORITIES: dict[str, int] = {
	"north": 0,
	"n": 0,
	"south": 1,
	"s": 1,
	"east": 2,
	"e": 2,
	"west": 3,
	"w": 3,
	"up": 4,
	"u": 4,
	"down": 5,
	"d": 5,
}
OTHER_DIRECTIONS_PRIORITY: int = 6
SENTENCE_TERMINATORS: tuple[str, ...] = (". ", "! ", "? ")
DISTANCE_SUFFIX_REGEX: RePatternType = re.compile(r"^(?P<base>.+)\|(?P<distance>[-+]?\d+)$", flags=re.DOTALL)


def normalizeDirection(direction: str) -> str:
	"""
	Converts a direction or direction alias to the full direction name.

	Args:
		direction: The direction, E.G. 'n' or 'North'.

	Returns:
		The full direction name, or an empty string if the text is not a direction.
	"""
	direction = direction.strip().lower()
	if direction in DIRECTIONS:
		return direction
	return DIRECTION_ALIASES.get(direction, "")


def getReverseDirection(direction: str) -> str:
	"""
	Determines the opposite of a direction.

	Args:
		direction: The direction.

	Returns:
		The reverse direction, or an empty string if the direction has no defined reverse.
	"""
	return REVERSE_DIRECTIONS.get(direction.lower(), "")


def sortDirections(directions: Iterable[str]) -> list[str]:
	"""
	Sorts directions in the canonical order used for searching and rendering.

	North, south, east, west, up, and down come first, followed by any other directions alphabetically.

	Args:
		directions: The directions to sort.

	Returns:
		A new list of the sorted directions.
	"""
	return sorted(
		directions, key=lambda direction: (DIRECTION_PRIORITIES.get(direction, OTHER_DIRECTIONS_PRIORITY), direction)
	)


def extractFirstSentence(description: str) -> str:
	"""
	Extracts the first sentence of a room description.

	Args:
		description: The room description.

	Returns:
		The text up to and including the first sentence terminator,
		or the first line if there is no terminator,
		or the whole description if there are neither.
	"""
	description = description.strip()
	if not description:
		return ""
	for terminator in SENTENCE_TERMINATORS:
		index: int = description.find(terminator)
		if index >= 0:
			return description[: index + 1].strip()
	index = description.find("\n")
	if index >= 0:
		return description[:index].strip()
	return description


def generateRoomID(title: str, description: str, exits: Iterable[str], distance: Optional[int] = None) -> str:
	"""
	Generates the content addressed identifier of a room.

	Args:
		title: The room title.
		description: The room description.
		exits: The exit directions of the room, in any order.
		distance: The distance from the first room of the map, if known.

	Returns:
		The room ID in the form 'title|first sentence|exits', with '|distance' appended if a distance was given.
	"""
	roomID: str = "|".join(
		(title.lower(), extractFirstSentence(description).lower(), ",".join(sorted(exits)))
	)
	if distance is not None:
		roomID += f"|{distance}"
	return roomID


def splitRoomID(roomID: str) -> tuple[str, Union[int, None]]:
	"""
	Splits the distance suffix from a room ID.

	Args:
		roomID: The room ID.

	Returns:
		The room ID without the distance, and the distance or None if the ID has no distance.
	"""
	match = DISTANCE_SUFFIX_REGEX.match(roomID)
	if match is None:
		return roomID, None
	return match.group("base"), int(match.group("distance"))


class Exit(object):
	"""
	An exit.

	An exit whose destination is None is known to exist, but leads somewhere unexplored.
	"""

	def __init__(self, destination: Optional[str] = None) -> None:
		self.destination: Union[str, None] = destination or None

	def __repr__(self) -> str:
		return f"{self.__class__.__name__}(destination={self.destination!r})"

	def __eq__(self, other: object) -> bool:
		if not isinstance(other, Exit):
			return NotImplemented
		return self.destination == other.destination

	@property
	def isExplored(self) -> bool:
		"""True if the destination of the exit is known."""
		return self.destination is not None

	@property
	def to(self) -> str:
		"""The destination room ID, or an empty string if unexplored."""
		return self.destination or ""


class Room(object):
	"""
	A room.
	"""

	def __init__(self, title: str = "", description: str = "", exits: Iterable[str] = ()) -> None:
		exits = list(exits)
		self.id: str = generateRoomID(title, description, exits)
		self.title: str = title
		self.description: str = description
		self.firstSentence: str = extractFirstSentence(description)
		self.exits: dict[str, Exit] = {direction: Exit() for direction in exits}
		self.visitCount: int = 1

	def __repr__(self) -> str:
		return f"{self.__class__.__name__}(id={self.id!r})"

	@property
	def sortedExits(self) -> list[tuple[str, Exit]]:
		"""The room exits, sorted by direction."""
		return [(direction, self.exits[direction]) for direction in sortDirections(self.exits)]

	@property
	def searchText(self) -> str:
		"""The lower case text that room searches are matched against."""
		return f"{self.title} {self.firstSentence} {' '.join(sorted(self.exits))}".lower()

	@property
	def info(self) -> str:
		"""A summery of the room info."""
		output: list[str] = []
		output.append(f"ID: '{self.id}'")
		output.append(f"Title: '{self.title}'")
		output.append("Description:")
		output.append("-" * 5)
		output.extend(self.description.splitlines())
		output.append("-" * 5)
		output.append(f"Visits: '{self.visitCount}'")
		output.append("Exits:")
		for direction, exitObj in self.sortedExits:
			output.append(f"{direction}: '{exitObj.destination if exitObj.isExplored else 'unexplored'}'")
		return "\n".join(output)

	def matchesSearch(self, terms: Sequence[str]) -> bool:
		"""
		Determines if the room matches every search term.

		Args:
			terms: The lower case search terms.

		Returns:
			True if every term is contained in the room's search text, False otherwise.
		"""
		text: str = self.searchText
		return all(term in text for term in terms)

	def updateExit(self, direction: str, destination: Optional[str]) -> None:
		"""Sets the destination of an exit, adding the exit if needed."""
		self.exits[direction] = Exit(destination)

	def removeExit(self, direction: str) -> bool:
		"""
		Removes an exit entirely.

		Args:
			direction: The direction of the exit.

		Returns:
			True if the exit existed, False otherwise.
		"""
		return self.exits.pop(direction, None) is not None
