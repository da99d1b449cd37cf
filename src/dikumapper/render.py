# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
from collections import deque
from collections.abc import Mapping
from typing import TYPE_CHECKING, Optional, Union

# Local Modules:
from .roomdata.objects import DIRECTION_ABBREVIATIONS, Exit, Room
from .typedef import COORDINATES_TYPE


if TYPE_CHECKING:  # pragma: no cover
	# Prevent cyclic import.
	from .world import World


CURRENT_ROOM_GLYPH: str = "▣"
ROOM_GLYPH: str = "▢"
UNKNOWN_ROOM_GLYPH: str = "▦"
UP_AND_DOWN_GLYPH: str = "⇅"
UP_GLYPH: str = "⇱"
DOWN_GLYPH: str = "⇲"
HORIZONTAL_CONNECTOR: str = "──"
VERTICAL_CONNECTOR: str = "│"
EMPTY_MAP_TEXT: str = "(exploring...)"
# Only cardinal directions move on the grid. Negative Y is north.
GRID_OFFSETS: dict[str, COORDINATES_TYPE] = {
	"north": (0, -1),
	"n": (0, -1),
	"south": (0, 1),
	"s": (0, 1),
	"east": (1, 0),
	"e": (1, 0),
	"west": (-1, 0),
	"w": (-1, 0),
}


class RoomMarker(object):
	"""
	A cell of the map grid.

	A marker without a room stands for an exit that leads somewhere unexplored.
	"""

	def __init__(self, room: Optional[Room] = None) -> None:
		self.room: Union[Room, None] = room

	def __repr__(self) -> str:
		return f"{self.__class__.__name__}(room={self.room!r})"

	@property
	def isUnknown(self) -> bool:
		return self.room is None


def _getExit(room: Room, direction: str) -> Union[Exit, None]:
	"""Returns the exit of a room in a direction, accepting the direction's short alias."""
	if direction in room.exits:
		return room.exits[direction]
	return room.exits.get(DIRECTION_ABBREVIATIONS.get(direction, direction))


def buildRoomGrid(rooms: Mapping[str, Room], origin: Room) -> dict[COORDINATES_TYPE, RoomMarker]:
	"""
	Lays out the rooms reachable from a room on a grid.

	The origin room is placed at (0, 0), and rooms are placed in breadth first order.
	A coordinate keeps the first marker placed on it, so loops that don't fit on a grid can't corrupt the layout.

	Args:
		rooms: All rooms of the map, indexed by ID.
		origin: The room at the center of the grid.

	Returns:
		The room markers, indexed by coordinates.
	"""
	grid: dict[COORDINATES_TYPE, RoomMarker] = {(0, 0): RoomMarker(origin)}
	visited: set[str] = {origin.id}
	queue: deque[tuple[Room, COORDINATES_TYPE]] = deque([(origin, (0, 0))])
	while queue:
		room, (x, y) = queue.popleft()
		for direction, exitObj in room.sortedExits:
			if direction not in GRID_OFFSETS:
				continue
			offsetX, offsetY = GRID_OFFSETS[direction]
			coordinates: COORDINATES_TYPE = (x + offsetX, y + offsetY)
			if coordinates in grid:
				continue
			if exitObj.isExplored and exitObj.to in rooms:
				neighbor: Room = rooms[exitObj.to]
				grid[coordinates] = RoomMarker(neighbor)
				if neighbor.id not in visited:
					visited.add(neighbor.id)
					queue.append((neighbor, coordinates))
			else:
				grid[coordinates] = RoomMarker()
	return grid


def _isConnected(
	first: Optional[RoomMarker], second: Optional[RoomMarker], direction: str, reverse: str
) -> bool:
	"""Determines if either of two neighboring markers has an exit leading to the other."""
	if first is None or second is None:
		return False
	exitObj: Union[Exit, None]
	if first.room is not None:
		exitObj = _getExit(first.room, direction)
		if exitObj is not None and (second.room is None or exitObj.to == second.room.id):
			return True
	if second.room is not None:
		exitObj = _getExit(second.room, reverse)
		if exitObj is not None and (first.room is None or exitObj.to == first.room.id):
			return True
	return False


def _getVerticalExits(room: Room) -> tuple[bool, bool]:
	return _getExit(room, "up") is not None, _getExit(room, "down") is not None


def renderVerticalExits(hasUp: bool, hasDown: bool) -> str:
	"""
	Returns the glyph for a combination of up and down exits.

	Args:
		hasUp: The room has an up exit.
		hasDown: The room has a down exit.

	Returns:
		The glyph, or an empty string if there are neither.
	"""
	if hasUp and hasDown:
		return UP_AND_DOWN_GLYPH
	elif hasUp:
		return UP_GLYPH
	elif hasDown:
		return DOWN_GLYPH
	return ""


def _getGlyph(
	marker: Optional[RoomMarker], currentRoomID: str, legend: Optional[Mapping[str, int]], cellWidth: int
) -> str:
	text: str
	if marker is None:
		text = ""
	elif marker.room is None:
		text = UNKNOWN_ROOM_GLYPH
	elif legend and marker.room.id in legend:
		text = str(legend[marker.room.id])
	elif marker.room.id == currentRoomID:
		text = CURRENT_ROOM_GLYPH
	else:
		text = renderVerticalExits(*_getVerticalExits(marker.room)) or ROOM_GLYPH
	return text.ljust(cellWidth)


def getViewport(width: int, height: int, cellWidth: int = 1) -> tuple[int, int]:
	"""
	Calculates how far the grid extends from the center in each direction.

	Args:
		width: The number of characters available per line.
		height: The number of lines available.
		cellWidth: The number of characters used by each room.

	Returns:
		The number of columns and rows that fit on either side of the center, never less than 0.
	"""
	pitch: int = cellWidth + len(HORIZONTAL_CONNECTOR)
	columns: int = max(1, (width + len(HORIZONTAL_CONNECTOR)) // pitch)
	rows: int = max(1, (height + 1) // 2)
	return (columns - 1) // 2, (rows - 1) // 2


def getLegendCellWidth(legend: Optional[Mapping[str, int]]) -> int:
	"""Returns the number of characters used by each room when the map shows a legend."""
	return max([1] + [len(str(number)) for number in legend.values()]) if legend else 1


def renderGrid(
	grid: Mapping[COORDINATES_TYPE, RoomMarker],
	width: int,
	height: int,
	currentRoomID: str = "",
	legend: Optional[Mapping[str, int]] = None,
) -> str:
	"""
	Renders a room grid as text.

	Each room row is followed by a row of vertical connectors, except for the last.
	Rooms outside of the viewport are left out.

	Args:
		grid: The room markers, indexed by coordinates.
		width: The number of characters available per line.
		height: The number of lines available.
		currentRoomID: The ID of the room the player is in.
		legend: Numbers to show in place of the glyphs of rooms, indexed by room ID.

	Returns:
		The rendered grid.
	"""
	cellWidth: int = getLegendCellWidth(legend)
	halfWidth, halfHeight = getViewport(width, height, cellWidth)
	lines: list[str] = []
	for y in range(-halfHeight, halfHeight + 1):
		roomLine: list[str] = []
		connectorLine: list[str] = []
		for x in range(-halfWidth, halfWidth + 1):
			marker: Union[RoomMarker, None] = grid.get((x, y))
			roomLine.append(_getGlyph(marker, currentRoomID, legend, cellWidth))
			if x < halfWidth:
				isConnected: bool = _isConnected(marker, grid.get((x + 1, y)), "east", "west")
				roomLine.append(HORIZONTAL_CONNECTOR if isConnected else " " * len(HORIZONTAL_CONNECTOR))
			if y < halfHeight:
				isConnected = _isConnected(marker, grid.get((x, y + 1)), "south", "north")
				connectorLine.append((VERTICAL_CONNECTOR if isConnected else "").ljust(cellWidth))
				if x < halfWidth:
					connectorLine.append(" " * len(HORIZONTAL_CONNECTOR))
		lines.append("".join(roomLine))
		if connectorLine:
			lines.append("".join(connectorLine))
	return "\n".join(lines)


def renderMap(
	world: World, width: int, height: int, legend: Optional[Mapping[str, int]] = None
) -> tuple[str, str]:
	"""
	Renders the map around the current room.

	Args:
		world: The world.
		width: The number of characters available per line.
		height: The number of lines available.
		legend: Numbers to show in place of the glyphs of rooms, indexed by room ID.

	Returns:
		The rendered map and the title of the current room.
	"""
	room: Union[Room, None] = world.currentRoom
	if room is None:
		return EMPTY_MAP_TEXT, ""
	grid: dict[COORDINATES_TYPE, RoomMarker] = buildRoomGrid(world.rooms, room)
	return renderGrid(grid, width, height, room.id, legend), room.title


def getVisibleRoomIDs(world: World, width: int, height: int, cellWidth: int = 1) -> list[str]:
	"""
	Lists the rooms that fit in the viewport.

	Args:
		world: The world.
		width: The number of characters available per line.
		height: The number of lines available.
		cellWidth: The number of characters used by each room, wider than 1 when the map shows a legend.

	Returns:
		The room IDs from the top row to the bottom, left to right, without duplicates.
	"""
	room: Union[Room, None] = world.currentRoom
	if room is None:
		return []
	grid: dict[COORDINATES_TYPE, RoomMarker] = buildRoomGrid(world.rooms, room)
	halfWidth, halfHeight = getViewport(width, height, cellWidth)
	roomIDs: list[str] = []
	for y in range(-halfHeight, halfHeight + 1):
		for x in range(-halfWidth, halfWidth + 1):
			marker: Union[RoomMarker, None] = grid.get((x, y))
			if marker is not None and marker.room is not None and marker.room.id not in roomIDs:
				roomIDs.append(marker.room.id)
	return roomIDs


def getPanelLayout(world: World, height: int) -> tuple[bool, str, int]:
	"""
	Divides the lines of the map panel.

	The map always gets at least one line. The vertical exits line is dropped first
	when there isn't room, then the title.

	Args:
		world: The world.
		height: The number of lines available to the panel.

	Returns:
		Whether the title is shown, the vertical exits text to show, and the height given to the map.
	"""
	room: Union[Room, None] = world.currentRoom
	verticalExits: str = renderVerticalExits(*_getVerticalExits(room)) if room is not None else ""
	showTitle: bool = height >= 2
	if height < 3:
		verticalExits = ""
	mapHeight: int = max(1, height - (1 if showTitle else 0) - (1 if verticalExits else 0))
	return showTitle, verticalExits, mapHeight


def formatMapPanel(
	world: World, width: int, height: int, legend: Optional[Mapping[str, int]] = None
) -> str:
	"""
	Formats the map for display in a panel.

	The panel consists of the current room title, the map, and the vertical exits of the current room,
	all within height lines.
	"""
	if world.currentRoom is None:
		return EMPTY_MAP_TEXT
	if height < 1:
		return ""
	showTitle, verticalExits, mapHeight = getPanelLayout(world, height)
	text, title = renderMap(world, width, mapHeight, legend)
	output: list[str] = [title[:width], text] if showTitle else [text]
	if verticalExits:
		output.append(verticalExits)
	return "\n".join(output)
