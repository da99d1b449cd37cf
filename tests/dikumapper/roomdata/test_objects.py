# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
import itertools
from unittest import TestCase

# Mapper Modules:
from dikumapper.roomdata.objects import (
	DIRECTIONS,
	Exit,
	Room,
	extractFirstSentence,
	generateRoomID,
	getReverseDirection,
	normalizeDirection,
	sortDirections,
	splitRoomID,
)


class TestDirections(TestCase):
	def test_normalizeDirection(self) -> None:
		self.assertEqual(normalizeDirection("n"), "north")
		self.assertEqual(normalizeDirection(" North "), "north")
		self.assertEqual(normalizeDirection("SW"), "southwest")
		self.assertEqual(normalizeDirection("look"), "")

	def test_getReverseDirection_isAnInvolution(self) -> None:
		for direction in DIRECTIONS:
			reverse: str = getReverseDirection(direction)
			self.assertIn(reverse, DIRECTIONS)
			self.assertEqual(getReverseDirection(reverse), direction)
		self.assertEqual(getReverseDirection("ne"), "sw")
		self.assertEqual(getReverseDirection("in"), "")

	def test_sortDirections(self) -> None:
		self.assertEqual(
			sortDirections(["southwest", "up", "north", "west", "down", "northeast", "east", "south"]),
			["north", "south", "east", "west", "up", "down", "northeast", "southwest"],
		)
		self.assertEqual(sortDirections(["d", "n"]), ["n", "d"])


class TestRoomID(TestCase):
	def test_extractFirstSentence(self) -> None:
		self.assertEqual(extractFirstSentence("A dark room. It smells."), "A dark room.")
		self.assertEqual(extractFirstSentence("Is it dark? Yes."), "Is it dark?")
		self.assertEqual(extractFirstSentence("No terminator\nSecond line"), "No terminator")
		self.assertEqual(extractFirstSentence("  Only one sentence.  "), "Only one sentence.")
		self.assertEqual(extractFirstSentence(""), "")

	def test_generateRoomID(self) -> None:
		self.assertEqual(
			generateRoomID("The Temple", "A huge temple. It is old.", ["south", "north"]),
			"the temple|a huge temple.|north,south",
		)
		self.assertEqual(generateRoomID("The Temple", "", [], 3), "the temple||3")

	def test_generateRoomID_ignoresExitOrder(self) -> None:
		exits: list[str] = ["north", "east", "up", "southwest"]
		expected: str = generateRoomID("A Road", "A long road.", exits)
		for permutation in itertools.permutations(exits):
			self.assertEqual(generateRoomID("A Road", "A long road.", permutation), expected)

	def test_generateRoomID_isCaseInsensitive(self) -> None:
		self.assertEqual(
			generateRoomID("A ROAD", "A LONG ROAD.", ["east"]), generateRoomID("a road", "a long road.", ["east"])
		)

	def test_generateRoomID_distinguishesDistances(self) -> None:
		ids: set[str] = {generateRoomID("A Road", "A long road.", ["east", "west"], distance) for distance in range(5)}
		self.assertEqual(len(ids), 5)
		self.assertNotEqual(
			generateRoomID("A Road", "", ["east"], 0), generateRoomID("A Road", "", ["east"])
		)

	def test_splitRoomID(self) -> None:
		self.assertEqual(splitRoomID("a road|a long road.|east|4"), ("a road|a long road.|east", 4))
		self.assertEqual(splitRoomID("a road|a long road.|east|-1"), ("a road|a long road.|east", -1))
		self.assertEqual(splitRoomID("a road|a long road.|east"), ("a road|a long road.|east", None))


class TestExit(TestCase):
	def test_exit(self) -> None:
		exitObj: Exit = Exit()
		self.assertFalse(exitObj.isExplored)
		self.assertEqual(exitObj.to, "")
		self.assertEqual(Exit(""), exitObj)
		exitObj = Exit("a road||east|1")
		self.assertTrue(exitObj.isExplored)
		self.assertEqual(exitObj.to, "a road||east|1")
		self.assertNotEqual(exitObj, Exit())


class TestRoom(TestCase):
	def setUp(self) -> None:
		self.room: Room = Room("The Temple", "A huge temple. It is old.", ["south", "north", "up"])

	def tearDown(self) -> None:
		del self.room

	def test_init(self) -> None:
		self.assertEqual(self.room.id, "the temple|a huge temple.|north,south,up")
		self.assertEqual(self.room.firstSentence, "A huge temple.")
		self.assertEqual(self.room.visitCount, 1)
		self.assertTrue(all(not exitObj.isExplored for exitObj in self.room.exits.values()))

	def test_sortedExits(self) -> None:
		self.assertEqual([direction for direction, _ in self.room.sortedExits], ["north", "south", "up"])

	def test_matchesSearch(self) -> None:
		self.assertTrue(self.room.matchesSearch(["temple", "huge"]))
		self.assertTrue(self.room.matchesSearch(["up"]))
		self.assertFalse(self.room.matchesSearch(["temple", "old"]))

	def test_updateExit_and_removeExit(self) -> None:
		self.room.updateExit("east", "a road||west|1")
		self.assertEqual(self.room.exits["east"].to, "a road||west|1")
		self.assertTrue(self.room.removeExit("east"))
		self.assertFalse(self.room.removeExit("east"))
		self.assertNotIn("east", self.room.exits)

	def test_info(self) -> None:
		self.room.updateExit("north", "a road||south|1")
		info: str = self.room.info
		self.assertIn("Title: 'The Temple'", info)
		self.assertIn("north: 'a road||south|1'", info)
		self.assertIn("south: 'unexplored'", info)
