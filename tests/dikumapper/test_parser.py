# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
from typing import Union
from unittest import TestCase

# Mapper Modules:
from dikumapper.parser import (
	RoomInfo,
	detectMovement,
	isPromptLine,
	isRoomTitle,
	isStatusOrCombatLine,
	parseBarsoomRoom,
	parseExitsLine,
	parseExitsList,
	parseRoomInfo,
)


class TestExitsParsing(TestCase):
	def test_parseExitsList(self) -> None:
		self.assertEqual(parseExitsList("north, south and up."), ["north", "south", "up"])
		self.assertEqual(parseExitsList("n e s w"), ["north", "east", "south", "west"])
		self.assertEqual(parseExitsList("north north"), ["north"])
		self.assertEqual(parseExitsList("NSE"), ["north", "south", "east"])
		self.assertEqual(parseExitsList("none."), [])

	def test_parseExitsLine_formats(self) -> None:
		self.assertEqual(parseExitsLine("Exits: north, south and east."), ["north", "south", "east"])
		self.assertEqual(parseExitsLine("[ Exits: n e u ]"), ["north", "east", "up"])
		self.assertEqual(parseExitsLine("Obvious exits: west"), ["west"])
		self.assertEqual(parseExitsLine("\x1b[32mExits: down.\x1b[0m"), ["down"])

	def test_parseExitsLine_compact(self) -> None:
		self.assertEqual(parseExitsLine("Exits:N(S)E>"), ["north", "south", "east"])
		self.assertEqual(parseExitsLine("25H 100V Exits:NE>"), ["north", "east"])
		# The most recent prompt on a line wins.
		self.assertEqual(parseExitsLine("Exits:N> 20H 30V Exits:SE>"), ["south", "east"])

	def test_parseExitsLine_whenNotAnExitsLine(self) -> None:
		self.assertEqual(parseExitsLine("The exits are hidden."), [])
		self.assertEqual(parseExitsLine(""), [])


class TestLineClassification(TestCase):
	def test_isPromptLine(self) -> None:
		self.assertTrue(isPromptLine("25H 100V >"))
		self.assertTrue(isPromptLine("  25H 100V 3X >  "))
		self.assertFalse(isPromptLine("The Dark Forest"))

	def test_isStatusOrCombatLine(self) -> None:
		self.assertTrue(isStatusOrCombatLine("A small dog is here."))
		self.assertTrue(isStatusOrCombatLine("You feel hungry."))
		self.assertFalse(isStatusOrCombatLine("The Dark Forest"))

	def test_isRoomTitle(self) -> None:
		self.assertTrue(isRoomTitle("The Dark Forest"))
		self.assertFalse(isRoomTitle("Forest"))
		self.assertFalse(isRoomTitle("the dark forest"))
		self.assertFalse(isRoomTitle("You are standing in a forest."))
		self.assertFalse(isRoomTitle("This title has far too many words to be a title at all"))

	def test_detectMovement(self) -> None:
		self.assertEqual(detectMovement("n"), "north")
		self.assertEqual(detectMovement("Southwest"), "southwest")
		self.assertEqual(detectMovement("look"), "")
		self.assertEqual(detectMovement("north gate"), "")


class TestBarsoomParsing(TestCase):
	def test_parseBarsoomRoom(self) -> None:
		lines: list[str] = [
			"25H 100V >",
			"--<",
			"The Market Square",
			"A busy square full of traders. Stalls line the road.",
			">-- Exits:NSE>",
		]
		info: Union[RoomInfo, None] = parseBarsoomRoom(lines)
		self.assertIsNotNone(info)
		if info is not None:
			self.assertTrue(info.isBarsoomRoom)
			self.assertEqual(info.barsoomStartIndex, 1)
			self.assertEqual(info.barsoomEndIndex, 4)
			self.assertEqual(info.title, "The Market Square")
			self.assertEqual(info.description, "A busy square full of traders. Stalls line the road.")
			self.assertEqual(info.exits, ["north", "south", "east"])

	def test_parseBarsoomRoom_withExitsAfterEndMarker(self) -> None:
		lines: list[str] = ["--<", "The Market Square", "A busy square.", ">--", "", "Exits: west."]
		info: Union[RoomInfo, None] = parseBarsoomRoom(lines)
		self.assertIsNotNone(info)
		if info is not None:
			self.assertEqual(info.exits, ["west"])

	def test_parseBarsoomRoom_withoutExits(self) -> None:
		info: Union[RoomInfo, None] = parseBarsoomRoom(["--<", "The Market Square", ">--"])
		self.assertIsNotNone(info)
		if info is not None:
			self.assertEqual(info.title, "The Market Square")
			self.assertEqual(info.description, "")
			self.assertEqual(info.exits, [])

	def test_parseBarsoomRoom_whenIncomplete(self) -> None:
		self.assertIsNone(parseBarsoomRoom(["--<", "The Market Square", "A busy square."]))
		self.assertIsNone(parseBarsoomRoom(["The Market Square", ">-- Exits:N>"]))
		self.assertIsNone(parseBarsoomRoom(["--<", "", ">--"]))

	def test_parseBarsoomRoom_usesLatestBlock(self) -> None:
		lines: list[str] = ["--<", "The Old Square", ">-- Exits:N>", "--<", "The New Square", ">-- Exits:S>"]
		info: Union[RoomInfo, None] = parseBarsoomRoom(lines)
		self.assertIsNotNone(info)
		if info is not None:
			self.assertEqual(info.title, "The New Square")
			self.assertEqual(info.barsoomStartIndex, 3)


class TestRoomInfoParsing(TestCase):
	def test_parseRoomInfo(self) -> None:
		lines: list[str] = [
			"You walk south.",
			"The Dark Forest",
			"   Trees loom over you. The path bends.",
			"Exits: north, south and east.",
		]
		info: Union[RoomInfo, None] = parseRoomInfo(lines)
		self.assertIsNotNone(info)
		if info is not None:
			self.assertFalse(info.isBarsoomRoom)
			self.assertEqual(info.title, "The Dark Forest")
			self.assertEqual(info.description, "Trees loom over you. The path bends.")
			self.assertEqual(info.exits, ["north", "south", "east"])

	def test_parseRoomInfo_compactExits(self) -> None:
		info: Union[RoomInfo, None] = parseRoomInfo(["The Dark Forest", "Trees loom.", "Exits:N(S)E>"])
		self.assertIsNotNone(info)
		if info is not None:
			self.assertEqual(info.title, "The Dark Forest")
			self.assertEqual(info.description, "Trees loom.")
			self.assertEqual(info.exits, ["north", "south", "east"])

	def test_parseRoomInfo_withoutExitsLine(self) -> None:
		self.assertIsNone(parseRoomInfo(["The Dark Forest", "   Trees loom over you."]))
		self.assertIsNone(parseRoomInfo([]))

	def test_parseRoomInfo_withoutRoomText(self) -> None:
		self.assertIsNone(parseRoomInfo(["25H 100V >", "Exits: north."]))

	def test_parseRoomInfo_usesLastExitsLine(self) -> None:
		lines: list[str] = [
			"Room One Here",
			"  First.",
			"Exits: north.",
			"",
			"Room Two Here",
			"  Second.",
			"Exits: south.",
		]
		info: Union[RoomInfo, None] = parseRoomInfo(lines)
		self.assertIsNotNone(info)
		if info is not None:
			self.assertEqual(info.title, "Room Two Here")
			self.assertEqual(info.description, "Second.")
			self.assertEqual(info.exits, ["south"])

	def test_parseRoomInfo_stopsAtPrompt(self) -> None:
		lines: list[str] = ["Some Old Text", "25H 100V >", "Room Two Here", "  Second.", "Exits: south."]
		info: Union[RoomInfo, None] = parseRoomInfo(lines)
		self.assertIsNotNone(info)
		if info is not None:
			self.assertEqual(info.title, "Room Two Here")
			self.assertEqual(info.description, "Second.")

	def test_parseRoomInfo_stopsAtTwoBlankLines(self) -> None:
		lines: list[str] = ["Old Room Title", "", "", "New Room Title", "  Desc.", "Exits: east."]
		info: Union[RoomInfo, None] = parseRoomInfo(lines)
		self.assertIsNotNone(info)
		if info is not None:
			self.assertEqual(info.title, "New Room Title")

	def test_parseRoomInfo_skipsStatusLines(self) -> None:
		lines: list[str] = ["The Dark Forest", "   Trees loom.", "A small dog sits here.", "Exits: north."]
		info: Union[RoomInfo, None] = parseRoomInfo(lines)
		self.assertIsNotNone(info)
		if info is not None:
			self.assertEqual(info.description, "Trees loom.")

	def test_parseRoomInfo_limitsLookBehind(self) -> None:
		lines: list[str] = ["The Far Room"]
		lines.extend(f"   Line {i} of text." for i in range(1, 20))
		lines.append("Exits: north.")
		info: Union[RoomInfo, None] = parseRoomInfo(lines)
		self.assertIsNotNone(info)
		if info is not None:
			self.assertEqual(info.title, "Line 5 of text.")
			self.assertNotIn("Line 4 of text.", info.description)

	def test_parseRoomInfo_prefersBarsoomRoom(self) -> None:
		lines: list[str] = ["The Dark Forest", "   Trees.", "Exits: north.", "--<", "The Market Square", ">-- Exits:S>"]
		info: Union[RoomInfo, None] = parseRoomInfo(lines)
		self.assertIsNotNone(info)
		if info is not None:
			self.assertTrue(info.isBarsoomRoom)
			self.assertEqual(info.title, "The Market Square")

	def test_parseRoomInfo_debugDoesNotChangeResult(self) -> None:
		lines: list[str] = ["The Dark Forest", "   Trees loom.", "A small dog sits here.", "Exits: north."]
		plain: Union[RoomInfo, None] = parseRoomInfo(lines)
		with self.assertLogs("dikumapper.parser", level="DEBUG"):
			traced: Union[RoomInfo, None] = parseRoomInfo(lines, debug=True)
		self.assertIsNotNone(plain)
		self.assertIsNotNone(traced)
		if plain is not None and traced is not None:
			self.assertEqual(
				(plain.title, plain.description, plain.exits), (traced.title, traced.description, traced.exits)
			)
			self.assertEqual(plain.debugInfo, "")
			self.assertIn("Exits line 3", traced.debugInfo)
