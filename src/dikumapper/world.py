# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
import itertools
import logging
import os.path
from collections import deque
from collections.abc import Generator, Mapping, Sequence
from timeit import default_timer as defaultTimer
from typing import Any, NamedTuple, Optional, Union

# Third-party Modules:
from rapidfuzz import fuzz

# Local Modules:
from . import render
from .roomdata.database import MAP_SCHEMA_VERSION, MapDatabaseError, dumpRooms, loadRooms
from .roomdata.objects import (
	DIRECTION_ABBREVIATIONS,
	Exit,
	Room,
	generateRoomID,
	getReverseDirection,
	normalizeDirection,
	splitRoomID,
)


logger: logging.Logger = logging.getLogger(__name__)


class PathStep(NamedTuple):
	direction: str
	roomID: str
	roomTitle: str


class NearbyRoom(NamedTuple):
	room: Room
	distance: int


class World(object):
	def __init__(self, mapPath: Optional[str] = None) -> None:
		self.mapPath: Union[str, None] = mapPath
		self.rooms: dict[str, Room] = {}
		self.currentRoomID: str = ""
		self.previousRoomID: str = ""
		self.lastDirection: str = ""
		self.roomNumbering: list[str] = []
		if mapPath is not None:
			self.loadRooms()

	@property
	def currentRoom(self) -> Union[Room, None]:
		return self.rooms.get(self.currentRoomID) if self.currentRoomID else None

	def getCurrentRoom(self) -> Union[Room, None]:
		return self.currentRoom

	def output(self, text: str) -> None:
		print(text)

	def _roomFromDict(self, roomID: str, roomDict: Mapping[str, Any]) -> Room:
		room: Room = Room(roomDict.get("title", ""), roomDict.get("description", ""))
		room.id = roomID
		room.firstSentence = roomDict.get("first_sentence", room.firstSentence)
		for direction, destination in (roomDict.get("exits") or {}).items():
			room.exits[direction] = Exit(destination)
		room.visitCount = roomDict.get("visit_count", 1)
		return room

	def loadRoomsV0(self, db: Mapping[str, Any]) -> bool:
		"""
		Loads a map that predates schema versioning.

		Maps from this era may lack room numbering, in which case it is rebuilt from the sorted room IDs.

		Returns:
			True if the map was migrated and should be saved.
		"""
		self.loadRoomsV1(db)
		if not self.roomNumbering and self.rooms:
			self.roomNumbering = sorted(self.rooms)
			logger.info(f"Created room numbering for {len(self.roomNumbering)} rooms.")
			return True
		return False

	def loadRoomsV1(self, db: Mapping[str, Any]) -> None:
		self.rooms = {
			roomID: self._roomFromDict(roomID, roomDict) for roomID, roomDict in (db.get("rooms") or {}).items()
		}
		self.currentRoomID = db.get("current_room_id") or ""
		self.previousRoomID = db.get("previous_room_id") or ""
		self.lastDirection = db.get("last_direction") or ""
		self.roomNumbering = []
		for roomID in db.get("room_numbering") or []:
			self._addToRoomNumbering(roomID)

	def loadRooms(self) -> None:
		"""
		Loads the map from disk.

		A missing map file is not an error, the map is simply empty.

		Raises:
			MapDatabaseError: The map file could not be read or is invalid.
		"""
		if self.mapPath is None:
			raise MapDatabaseError("No map file path given.")
		if not os.path.exists(self.mapPath):
			logger.info(f"No map file at '{self.mapPath}'. Starting a new map.")
			return None
		startTime: float = defaultTimer()
		logger.info("Loading the map file.")
		errors: Union[str, None]
		db: Union[dict[str, Any], None]
		errors, db, schemaVersion = loadRooms(self.mapPath)
		if db is None:
			logger.error(errors)
			raise MapDatabaseError(errors)
		schemaVersionOutput: str = "latest" if schemaVersion == MAP_SCHEMA_VERSION else f"V{schemaVersion}"
		logger.info(f"Creating room objects with {schemaVersionOutput} schema.")
		isMigrated: bool = False
		if schemaVersion < 1:
			isMigrated = self.loadRoomsV0(db)
		else:
			self.loadRoomsV1(db)
		db.clear()
		elapsedTime: float = defaultTimer() - startTime
		logger.info(f"Map loaded with {len(self.rooms)} rooms in {elapsedTime:.1f} seconds.")
		if isMigrated:
			try:
				self.saveRooms()
			except MapDatabaseError as e:
				logger.warning(f"Unable to save the migrated map: {e}")

	def saveRooms(self) -> None:
		"""
		Saves the map to disk.

		Raises:
			MapDatabaseError: The map could not be saved.
		"""
		if self.mapPath is None:
			raise MapDatabaseError("No map file path given.")
		startTime: float = defaultTimer()
		db: dict[str, Any] = {}
		db["rooms"] = {}
		for roomID, room in self.rooms.items():
			newRoom: dict[str, Any] = {}
			newRoom["id"] = room.id
			newRoom["title"] = room.title
			newRoom["description"] = room.description
			newRoom["first_sentence"] = room.firstSentence
			newRoom["exits"] = {direction: exitObj.to for direction, exitObj in room.exits.items()}
			newRoom["visit_count"] = room.visitCount
			db["rooms"][roomID] = newRoom
		db["current_room_id"] = self.currentRoomID
		db["previous_room_id"] = self.previousRoomID
		db["last_direction"] = self.lastDirection
		db["room_numbering"] = list(self.roomNumbering)
		dumpRooms(db, self.mapPath)
		elapsedTime: float = defaultTimer() - startTime
		logger.info(f"Map saved in {elapsedTime:.1f} seconds.")

	def setLastDirection(self, direction: str) -> None:
		self.lastDirection = normalizeDirection(direction) or direction.strip().lower()

	def _addToRoomNumbering(self, roomID: str) -> None:
		if roomID not in self.roomNumbering:
			self.roomNumbering.append(roomID)

	def getRoomNumber(self, roomID: str) -> int:
		"""Returns the 1-indexed room number of a room, or 0 if the room has no number."""
		try:
			return self.roomNumbering.index(roomID) + 1
		except ValueError:
			return 0

	def getRoomByNumber(self, number: int) -> Union[Room, None]:
		if 1 <= number <= len(self.roomNumbering):
			return self.rooms.get(self.roomNumbering[number - 1])
		return None

	def getNeighbors(self, room: Room) -> Generator[tuple[str, Room], None, None]:
		"""
		Yields the rooms that a room's explored exits lead to.

		Exits are processed in canonical direction order, so that searches are reproducible.
		"""
		for direction, exitObj in room.sortedExits:
			if exitObj.isExplored and exitObj.to in self.rooms:
				yield direction, self.rooms[exitObj.to]

	def distanceToOrigin(self) -> int:
		"""
		Calculates the number of moves from the current room to the first room of the map.

		Returns:
			The distance, or -1 if there is no current room, no first room, or no known route.
		"""
		if not self.roomNumbering or self.currentRoom is None:
			return -1
		originID: str = self.roomNumbering[0]
		if self.currentRoomID == originID:
			return 0
		distances: dict[str, int] = {self.currentRoomID: 0}
		queue: deque[Room] = deque([self.currentRoom])
		while queue:
			room: Room = queue.popleft()
			for _, neighbor in self.getNeighbors(room):
				if neighbor.id == originID:
					return distances[room.id] + 1
				if neighbor.id not in distances:
					distances[neighbor.id] = distances[room.id] + 1
					queue.append(neighbor)
		return -1

	def _mergeRoom(self, room: Room, candidate: Room) -> None:
		room.visitCount += 1
		for direction, exitObj in candidate.exits.items():
			if direction not in room.exits:
				room.exits[direction] = Exit(exitObj.destination)

	def addOrUpdateRoom(self, candidate: Room) -> Room:
		"""
		Adds a newly observed room to the map, or merges it with the room it was identified as.

		The candidate is identified by following the exit of the last movement from the current room when
		that exit is known. Otherwise, the candidate's distance from the first room of the map is used to tell
		it apart from other rooms with the same title, first sentence, and exits.
		After the room is resolved, the current room and the resolved room are linked in both directions,
		and the resolved room becomes the current room.

		Args:
			candidate: A room created from parsed game output.

		Returns:
			The room in the map that the candidate was resolved to.

		Raises:
			ValueError: The candidate has no title.
		"""
		if not candidate.title:
			raise ValueError("Unable to add a room without a title.")
		baseID: str = generateRoomID(candidate.title, candidate.description, candidate.exits)
		current: Union[Room, None] = self.currentRoom
		resolved: Union[Room, None] = None
		if current is not None and self.lastDirection:
			exitObj: Union[Exit, None] = current.exits.get(self.lastDirection)
			if exitObj is not None and exitObj.isExplored and exitObj.to in self.rooms:
				if splitRoomID(exitObj.to)[0] == baseID:
					resolved = self.rooms[exitObj.to]
					self._mergeRoom(resolved, candidate)
					logger.debug(f"Revisited {resolved.id!r} through a known exit.")
		if resolved is None:
			distance: int = self.distanceToOrigin()
			if current is not None and distance >= 0:
				distance += 1
			if current is None and not self.roomNumbering:
				distance = 0
			roomID: str = generateRoomID(candidate.title, candidate.description, candidate.exits, distance)
			if roomID in self.rooms:
				resolved = self.rooms[roomID]
				self._mergeRoom(resolved, candidate)
				logger.debug(f"Revisited {roomID!r}.")
			else:
				candidate.id = roomID
				self.rooms[roomID] = candidate
				self._addToRoomNumbering(roomID)
				resolved = candidate
				logger.debug(f"Added room {self.getRoomNumber(roomID)}: {roomID!r}.")
		if current is not None and self.lastDirection and current.id != resolved.id:
			current.updateExit(self.lastDirection, resolved.id)
			reverseDirection: str = getReverseDirection(self.lastDirection)
			if reverseDirection:
				# The world may not be symmetric, but this is the best guess until proven otherwise.
				resolved.updateExit(reverseDirection, current.id)
		self.previousRoomID = self.currentRoomID
		self.currentRoomID = resolved.id
		return resolved

	def relocate(self, candidate: Room) -> Room:
		"""
		Moves the player to a room that was reached without using an exit, such as after a recall.

		No exits are linked. The candidate is resolved to the earliest numbered room with the same title,
		first sentence, and exits, or added to the map if there is none.

		Args:
			candidate: A room created from parsed game output.

		Returns:
			The room in the map that the candidate was resolved to.

		Raises:
			ValueError: The candidate has no title.
		"""
		if not candidate.title:
			raise ValueError("Unable to add a room without a title.")
		baseID: str = generateRoomID(candidate.title, candidate.description, candidate.exits)
		previousRoomID: str = self.currentRoomID
		self.lastDirection = ""
		for roomID in self.roomNumbering:
			if roomID in self.rooms and splitRoomID(roomID)[0] == baseID:
				resolved: Room = self.rooms[roomID]
				self._mergeRoom(resolved, candidate)
				logger.debug(f"Relocated to {roomID!r}.")
				break
		else:
			self.currentRoomID = ""
			resolved = self.addOrUpdateRoom(candidate)
		self.previousRoomID = previousRoomID
		self.currentRoomID = resolved.id
		return resolved

	def removeExit(self, direction: str, roomID: Optional[str] = None) -> bool:
		"""
		Deletes an exit that turned out not to exist.

		Args:
			direction: The direction of the exit.
			roomID: The room containing the exit. Defaults to the current room.

		Returns:
			True if the exit was removed, False otherwise.
		"""
		room: Union[Room, None] = self.rooms.get(roomID) if roomID is not None else self.currentRoom
		if room is None:
			return False
		direction = normalizeDirection(direction) or direction.strip().lower()
		if room.removeExit(direction):
			logger.info(f"Removed exit {direction} from {room.id!r}.")
			return True
		return False

	def getVerticalExits(self) -> tuple[bool, bool]:
		"""Determines if the current room has up and down exits."""
		room: Union[Room, None] = self.currentRoom
		if room is None:
			return False, False
		return any(d in room.exits for d in ("up", "u")), any(d in room.exits for d in ("down", "d"))

	def _pathFind(self, targetID: str) -> Union[list[PathStep], None]:
		origin: Union[Room, None] = self.currentRoom
		if origin is None or not targetID or targetID not in self.rooms:
			return None
		if origin.id == targetID:
			return []
		# Each key-value pair is a room and the step taken to reach it.
		parents: dict[str, tuple[str, PathStep]] = {}
		visited: set[str] = {origin.id}
		queue: deque[Room] = deque([origin])
		while queue:
			room: Room = queue.popleft()
			for direction, neighbor in self.getNeighbors(room):
				if neighbor.id in visited:
					continue
				visited.add(neighbor.id)
				parents[neighbor.id] = (room.id, PathStep(direction, neighbor.id, neighbor.title))
				if neighbor.id == targetID:
					break
				queue.append(neighbor)
			else:
				continue
			break
		else:
			# The queue was exhausted without reaching the target.
			return None
		results: list[PathStep] = []
		roomID: str = targetID
		while roomID != origin.id:
			roomID, step = parents[roomID]
			results.append(step)
		results.reverse()
		return results

	def findPath(self, targetID: str) -> Union[list[str], None]:
		"""
		Finds the shortest path from the current room to another room.

		Args:
			targetID: The ID of the destination room.

		Returns:
			The directions to walk, an empty list if the current room is the destination,
			or None if there is no known route.
		"""
		steps: Union[list[PathStep], None] = self._pathFind(targetID)
		if steps is None:
			return None
		return [step.direction for step in steps]

	def findPathWithRooms(self, targetID: str) -> Union[list[PathStep], None]:
		"""
		Finds the shortest path from the current room to another room, along with the rooms on the way.

		Args:
			targetID: The ID of the destination room.

		Returns:
			The steps to take, an empty list if the current room is the destination,
			or None if there is no known route.
		"""
		return self._pathFind(targetID)

	def findNearbyRooms(self, maxDistance: int) -> Union[list[NearbyRoom], None]:
		"""
		Finds the rooms within a number of moves of the current room.

		Args:
			maxDistance: The maximum number of moves.

		Returns:
			The rooms, not including the current room, sorted by distance then title,
			or None if there is no current room.
		"""
		origin: Union[Room, None] = self.currentRoom
		if origin is None:
			return None
		distances: dict[str, int] = {origin.id: 0}
		results: list[NearbyRoom] = []
		queue: deque[Room] = deque([origin])
		while queue:
			room: Room = queue.popleft()
			if distances[room.id] >= maxDistance:
				continue
			for _, neighbor in self.getNeighbors(room):
				if neighbor.id not in distances:
					distances[neighbor.id] = distances[room.id] + 1
					results.append(NearbyRoom(neighbor, distances[neighbor.id]))
					queue.append(neighbor)
		results.sort(key=lambda item: (item.distance, item.room.title))
		return results

	def findRooms(self, query: str) -> list[Room]:
		"""
		Searches for rooms by title, first sentence, and exits.

		Args:
			query: Space separated search terms, all of which must match.

		Returns:
			The matching rooms, in room number order.
		"""
		terms: list[str] = query.lower().split()
		if not terms:
			return []
		matches: list[Room] = [room for room in self.rooms.values() if room.matchesSearch(terms)]
		matches.sort(key=lambda room: (self.getRoomNumber(room.id) or len(self.roomNumbering) + 1, room.id))
		return matches

	def suggestRooms(self, query: str, limit: int = 4) -> list[str]:
		"""Returns the room titles most similar to a query."""
		query = query.strip().lower()
		titles: list[str] = sorted({room.title for room in self.rooms.values()})
		titles.sort(key=lambda title: fuzz.ratio(title.lower(), query), reverse=True)
		return titles[:limit]

	def getRoomFromQuery(self, text: str) -> Union[Room, None]:
		"""
		Finds a single room by room number or search terms, reporting problems to the user.

		Args:
			text: A room number, optionally prefixed with '#', or search terms.

		Returns:
			The room, or None if no single room matched.
		"""
		text = text.strip()
		if not text:
			self.output("No room number or search terms specified.")
			return None
		if text.lstrip("#").isdecimal():
			number: int = int(text.lstrip("#"))
			room: Union[Room, None] = self.getRoomByNumber(number)
			if room is None:
				self.output(f"No room with number {number}.")
			return room
		matches: list[Room] = self.findRooms(text)
		if len(matches) == 1:
			return matches[0]
		elif matches:
			self.output(f"{len(matches)} rooms match '{text}':")
			for room in matches:
				self.output(f"  #{self.getRoomNumber(room.id)} {room.title}")
		else:
			suggestions: list[str] = self.suggestRooms(text)
			if suggestions:
				self.output(f"No rooms match '{text}'. Did you mean {', '.join(suggestions)}?")
			else:
				self.output("No rooms have been explored yet.")
		return None

	def createSpeedWalk(self, directionsList: Sequence[str]) -> str:
		"""Given a list of directions, return a string of the directions in standard speed walk format"""
		result: list[str] = []
		for direction, group in itertools.groupby(directionsList):
			lenGroup: int = len(list(group))
			abbreviation: str = DIRECTION_ABBREVIATIONS.get(direction, direction)
			if lenGroup == 1:
				result.append(abbreviation)
			else:
				result.append(f"{lenGroup}{abbreviation}")
		return f"{len(directionsList)} rooms. {', '.join(result)}"

	def renderMap(self, width: int, height: int) -> tuple[str, str]:
		return render.renderMap(self, width, height)

	def renderMapWithLegend(self, width: int, height: int, legend: Mapping[str, int]) -> tuple[str, str]:
		return render.renderMap(self, width, height, legend)

	def getVisibleRoomIDs(self, width: int, height: int, cellWidth: int = 1) -> list[str]:
		return render.getVisibleRoomIDs(self, width, height, cellWidth)

	def formatMapPanel(self, width: int, height: int, legend: Optional[Mapping[str, int]] = None) -> str:
		return render.formatMapPanel(self, width, height, legend)
