# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
import logging
import threading
from collections import deque
from collections.abc import Callable
from queue import SimpleQueue
from typing import Optional, Union

# Local Modules:
from . import USER_DATA
from .cleanmap import FailedMoveCleaner
from .config import Config
from .parser import RoomInfo, detectMovement, isPromptLine, parseRoomInfo
from .roomdata.database import MapDatabaseError
from .render import getLegendCellWidth, getPanelLayout
from .roomdata.objects import Room
from .typedef import GAME_WRITER_TYPE, MAPPER_QUEUE_TYPE, MUD_EVENT_HANDLER_TYPE, OUTPUT_WRITER_TYPE
from .utils import formatDocString, stripAnsi
from .world import NearbyRoom, PathStep, World


LINE_WINDOW_SIZE: int = 100
RECALL_TEXT: str = "recall"


logger: logging.Logger = logging.getLogger(__name__)


class Mapper(threading.Thread, World):
	"""
	Implements the mapper session.

	The mapper thread is the only code that modifies the world.
	Other threads hand it game output and user input through its queue.
	"""

	def __init__(
		self,
		mapPath: Optional[str] = None,
		gameWriter: Optional[GAME_WRITER_TYPE] = None,
		outputWriter: Optional[OUTPUT_WRITER_TYPE] = None,
	) -> None:
		threading.Thread.__init__(self)
		self.name: str = "Mapper"
		self.queue: MAPPER_QUEUE_TYPE = SimpleQueue()
		self._gameWriter: Union[GAME_WRITER_TYPE, None] = gameWriter
		self._outputWriter: Union[OUTPUT_WRITER_TYPE, None] = outputWriter
		cfg: Config = Config()
		self.autoSave: bool = cfg.getBool("autoSave")
		self.isDebugging: bool = cfg.getBool("mapDebug")
		self.mapWidth: int = cfg.getInt("mapWidth")
		self.mapHeight: int = cfg.getInt("mapHeight")
		self.nearbyDistance: int = cfg.getInt("nearbyDistance")
		del cfg
		# Lines received since the last movement command.
		self.lines: deque[str] = deque(maxlen=LINE_WINDOW_SIZE)
		self.pendingMovement: str = ""
		# Set when the game mentions a recall, which moves the player without using an exit.
		self.isRecalling: bool = False
		self.autoWalk: bool = False
		self.autoWalkSteps: list[PathStep] = []
		self.autoWalkTargetID: str = ""
		self.mapLegend: dict[str, int] = {}
		self.userCommands: list[str] = [
			func[len("user_command_") :]
			for func in dir(self)
			if func.startswith("user_command_") and callable(getattr(self, func))
		]
		self.mudEventHandlers: dict[str, set[MUD_EVENT_HANDLER_TYPE]] = {}
		for legacyHandler in [
			func[len("mud_event_") :]
			for func in dir(self)
			if func.startswith("mud_event_") and callable(getattr(self, func))
		]:
			self.registerMudEventHandler(legacyHandler, getattr(self, "mud_event_" + legacyHandler))
		self.unknownMudEvents: list[str] = []
		self.failedMoveCleaner: FailedMoveCleaner = FailedMoveCleaner(self)
		World.__init__(self, mapPath=mapPath)

	def output(self, text: str) -> None:
		# Override World.output.
		if self._outputWriter is not None:
			self._outputWriter(text)
		else:
			print(text)

	def sendGame(self, text: str) -> None:
		if self._gameWriter is not None:
			self._gameWriter(text)
		else:
			logger.debug(f"No game connection, dropping {text!r}.")

	def startMovement(self, direction: str) -> None:
		"""Notes a movement command, so the next room received from the game is linked to the current room."""
		self.pendingMovement = direction
		self.lines.clear()
		self.mapLegend.clear()

	def detectRoom(self) -> Union[Room, None]:
		"""
		Looks for a room in the lines received since the pending movement.

		Returns:
			The room in the map that the detected room was resolved to, or None if no room was detected.
		"""
		if not self.pendingMovement:
			return None
		info: Union[RoomInfo, None] = parseRoomInfo(self.lines, debug=self.isDebugging)
		if self.isDebugging and info is not None and info.debugInfo:
			self.output(info.debugInfo)
		if info is None or not info.title:
			return None
		if info.isBarsoomRoom and not info.exits:
			# Exits may still follow the end marker. A prompt after it means they won't.
			if not any(isPromptLine(line) for line in list(self.lines)[info.barsoomEndIndex + 1 :]):
				return None
		direction: str = self.pendingMovement
		self.pendingMovement = ""
		self.lines.clear()
		room: Room = Room(info.title, info.description, info.exits)
		resolved: Room
		if self.isRecalling:
			self.isRecalling = False
			resolved = self.relocate(room)
			if self.isDebugging:
				self.output(f"Placed in {resolved.title} without linking it, after a recall.")
		else:
			self.setLastDirection(direction)
			resolved = self.addOrUpdateRoom(room)
		if resolved is room:
			logger.info(f"Added room {self.getRoomNumber(resolved.id)}: {resolved.title}.")
		if self.autoSave and self.mapPath is not None:
			try:
				self.saveRooms()
			except MapDatabaseError as e:
				self.output(f"Unable to save the map: {e}")
		if self.autoWalk:
			self.continueAutoWalk(resolved)
		return resolved

	def mud_event_line(self, text: str) -> None:
		self.lines.append(text)
		if RECALL_TEXT in text.lower():
			self.isRecalling = True
			if self.isDebugging:
				self.output("Detected a recall. The next room will not be linked.")
		if self.pendingMovement:
			self.detectRoom()

	def movementFailed(self, direction: str) -> None:
		"""
		Called when the game refuses a movement.

		Any auto walk in progress is planned again around the missing exit, or stopped if no route remains.
		"""
		if not self.autoWalk:
			return None
		self.output(f"Unable to go {direction}. Finding another route.")
		self.planAutoWalk()

	def findAutoWalkTarget(self) -> Union[list[PathStep], None]:
		"""Finds a route to the auto walk target, or to another room with the same title if there is none."""
		steps: Union[list[PathStep], None] = self.findPathWithRooms(self.autoWalkTargetID)
		if steps is not None or self.autoWalkTargetID not in self.rooms:
			return steps
		title: str = self.rooms[self.autoWalkTargetID].title
		for room in self.findRooms(title):
			if room.title != title:
				continue
			steps = self.findPathWithRooms(room.id)
			if steps is not None:
				self.autoWalkTargetID = room.id
				return steps
		return None

	def planAutoWalk(self) -> None:
		steps: Union[list[PathStep], None] = self.findAutoWalkTarget()
		if steps is None:
			self.output("No route to the destination. Auto walk stopped.")
			self.stopAutoWalk()
		elif not steps:
			self.output("Arriving at destination.")
			self.stopAutoWalk()
		else:
			self.autoWalk = True
			self.autoWalkSteps = steps
			self.walkNextDirection()

	def continueAutoWalk(self, room: Room) -> None:
		if not self.autoWalkSteps:
			self.output("Arriving at destination.")
			self.stopAutoWalk()
		elif self.autoWalkSteps[0].roomID != room.id:
			# The walk went somewhere unexpected.
			logger.debug(f"Expected {self.autoWalkSteps[0].roomID!r}, arrived in {room.id!r}.")
			self.planAutoWalk()
		else:
			self.autoWalkSteps.pop(0)
			if self.autoWalkSteps:
				self.walkNextDirection()
			else:
				self.output("Arriving at destination.")
				self.stopAutoWalk()

	def walkNextDirection(self) -> None:
		if not self.autoWalkSteps:
			return None
		direction: str = self.autoWalkSteps[0].direction
		self.startMovement(direction)
		self.sendGame(direction)

	def stopAutoWalk(self) -> str:
		self.autoWalk = False
		self.autoWalkSteps = []
		self.autoWalkTargetID = ""
		return "Auto walk canceled!"

	def fitMapLegend(self, numberRooms: Callable[[list[str]], dict[str, int]]) -> dict[str, int]:
		"""
		Numbers the rooms that the map command shows.

		Numbers wider than a room glyph widen every cell of the map, so fewer rooms fit.
		The rooms are numbered again until every numbered room fits.

		Args:
			numberRooms: Takes the visible room IDs, and returns the number of each room to show.

		Returns:
			The numbers, indexed by room ID.
		"""
		_, _, mapHeight = getPanelLayout(self, self.mapHeight)
		cellWidth: int = 1
		while True:
			legend: dict[str, int] = numberRooms(self.getVisibleRoomIDs(self.mapWidth, mapHeight, cellWidth))
			neededWidth: int = getLegendCellWidth(legend)
			if neededWidth <= cellWidth:
				return legend
			cellWidth = neededWidth

	def formatNearbyRooms(self, nearby: list[NearbyRoom]) -> list[str]:
		output: list[str] = []
		currentDistance: int = -1
		for number, item in enumerate(nearby, start=1):
			if item.distance != currentDistance:
				currentDistance = item.distance
				output.append(f"{currentDistance} {'step' if currentDistance == 1 else 'steps'} away:")
			exits: str = ", ".join(direction for direction, _ in item.room.sortedExits) or "none"
			output.append(f"  {number}. {item.room.title} [{exits}]")
		return output

	def user_command_path(self, *args: str) -> None:
		"""Shows the route to a room, given its number or search terms."""
		room: Union[Room, None] = self.getRoomFromQuery(args[0] if args else "")
		if room is None:
			return None
		steps: Union[list[PathStep], None] = self.findPathWithRooms(room.id)
		if steps is None:
			self.output(f"No route to {room.title}.")
		elif not steps:
			self.output("You are already there!")
		else:
			self.output(self.createSpeedWalk([step.direction for step in steps]))
			for step in steps:
				self.output(f"  {step.direction}: {step.roomTitle}")

	def user_command_run(self, *args: str) -> None:
		"""Walks to a room, given its number or search terms."""
		room: Union[Room, None] = self.getRoomFromQuery(args[0] if args else "")
		if room is None:
			return None
		self.stopAutoWalk()
		self.autoWalkTargetID = room.id
		self.output(f"Walking to {room.title}.")
		self.planAutoWalk()

	def user_command_stop(self, *args: str) -> None:
		"""Stops walking."""
		self.output(self.stopAutoWalk())

	def user_command_nearby(self, *args: str) -> None:
		"""Lists the rooms within a number of steps, and numbers them on the map."""
		text: str = args[0].strip() if args else ""
		maxDistance: int = int(text) if text.isdecimal() else self.nearbyDistance
		nearby: Union[list[NearbyRoom], None] = self.findNearbyRooms(maxDistance)
		if nearby is None:
			self.output("The current room is unknown.")
			return None
		nearbyRooms: list[NearbyRoom] = nearby
		legend: dict[str, int] = self.fitMapLegend(
			lambda visible: {
				roomID: number
				for number, roomID in enumerate(
					[item.room.id for item in nearbyRooms if item.room.id in visible], start=1
				)
			}
		)
		nearby = [item for item in nearby if item.room.id in legend]
		if not nearby:
			self.output(f"No nearby rooms within {maxDistance} steps are visible on the map.")
			return None
		self.mapLegend = legend
		self.output("\n".join(self.formatNearbyRooms(nearby)))

	def user_command_legend(self, *args: str) -> None:
		"""Lists the room numbers of the rooms on the map, and shows them on the map."""
		legend: dict[str, int] = self.fitMapLegend(
			lambda visible: {
				roomID: number
				for number, roomID in enumerate(self.roomNumbering, start=1)
				if roomID in visible
			}
		)
		rooms: list[Room] = [self.rooms[roomID] for roomID in legend]
		if not rooms:
			self.output("No rooms are visible on the map.")
			return None
		self.mapLegend = legend
		self.output("\n".join(f"  #{self.getRoomNumber(room.id)} {room.title}" for room in rooms))

	def user_command_rooms(self, *args: str) -> None:
		"""Searches for rooms by title, first sentence, and exits."""
		query: str = args[0].strip() if args else ""
		matches: list[Room] = self.findRooms(query)
		if matches:
			self.output("\n".join(f"  #{self.getRoomNumber(room.id)} {room.title}" for room in matches))
		elif query:
			suggestions: list[str] = self.suggestRooms(query)
			self.output(f"No rooms match '{query}'." + (f" Did you mean {', '.join(suggestions)}?" if suggestions else ""))
		else:
			self.output("Usage: rooms [search terms]")

	def user_command_rinfo(self, *args: str) -> None:
		"""Shows the details of a room, the current room by default."""
		text: str = args[0].strip() if args else ""
		room: Union[Room, None] = self.getRoomFromQuery(text) if text else self.currentRoom
		if room is not None:
			self.output(f"Room number: {self.getRoomNumber(room.id)}\n{room.info}")
		elif not text:
			self.output("The current room is unknown.")

	def user_command_map(self, *args: str) -> None:
		"""Shows the map around the current room. Takes an optional width and height."""
		sizes: list[str] = args[0].split() if args else []
		width: int = int(sizes[0]) if len(sizes) > 0 and sizes[0].isdecimal() else self.mapWidth
		height: int = int(sizes[1]) if len(sizes) > 1 and sizes[1].isdecimal() else self.mapHeight
		self.output(self.formatMapPanel(width, height, self.mapLegend or None))

	def user_command_savemap(self, *args: str) -> None:
		"""Saves the map."""
		try:
			self.saveRooms()
		except MapDatabaseError as e:
			self.output(f"Unable to save the map: {e}")
		else:
			self.output("Map saved.")

	def user_command_maphelp(self, *args: str) -> None:
		"""Shows documentation for mapper commands"""
		result: list[str] = ["Mapper Commands"]
		for funcName in self.userCommands:
			docString: str = formatDocString(getattr(self, "user_command_" + funcName), prefix=" " * 8).strip()
			result.append(f"    {funcName}: {docString}")
		self.output("\n".join(result))

	def handleUserInput(self, text: str) -> bool:
		"""
		Handles a line of input from the user.

		Mapper commands are run locally. Anything else is sent to the game.

		Args:
			text: The input.

		Returns:
			True if the input was a mapper command, False otherwise.
		"""
		text = text.strip()
		if not text:
			return False
		userCommand: str = text.split()[0]
		if userCommand in self.userCommands:
			args: str = text[len(userCommand) :].strip()
			getattr(self, f"user_command_{userCommand}")(args)
			return True
		movement: str = detectMovement(text)
		if movement:
			if self.autoWalk:
				self.output(self.stopAutoWalk())
			self.startMovement(movement)
		self.sendGame(text)
		return False

	def handleMudEvent(self, event: str, text: str) -> None:
		text = stripAnsi(text)
		if event in self.mudEventHandlers:
			for handler in list(self.mudEventHandlers[event]):
				handler(text)
		elif event not in self.unknownMudEvents:
			self.unknownMudEvents.append(event)
			logger.debug("received data with an unknown event type of " + event)

	def registerMudEventHandler(self, event: str, handler: MUD_EVENT_HANDLER_TYPE) -> None:
		"""Registers a method to handle mud events of a given type.
		Params: event, handler
		where event is the name of the event type,
		and handler is a method that takes a single argument, text, which is the text received from the mud.
		"""
		if event not in self.mudEventHandlers:
			self.mudEventHandlers[event] = set()
		self.mudEventHandlers[event].add(handler)

	def deregisterMudEventHandler(self, event: str, handler: MUD_EVENT_HANDLER_TYPE) -> None:
		"""Deregisters mud event handlers.
		params: same as registerMudEventHandler.
		"""
		if event in self.mudEventHandlers and handler in self.mudEventHandlers[event]:
			self.mudEventHandlers[event].remove(handler)

	def run(self) -> None:
		while True:
			item = self.queue.get()
			if item is None:
				break
			dataType, text = item
			try:
				if dataType == USER_DATA:
					self.handleUserInput(text)
				else:
					self.handleMudEvent(dataType, text)
			except Exception:
				logger.exception(f"Error while handling {dataType} data.")
				self.output("map error")
		logger.debug("Exiting mapper thread.")
