# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
import logging
from unittest import TestCase
from unittest.mock import Mock

# Mapper Modules:
from dikumapper.mapper import Mapper
from dikumapper.mudevents import Handler


class DummyHandler(Handler):
	event: str = "testEvent"
	handleText: Mock = Mock()

	def handle(self, text: str) -> None:
		self.handleText(f"I received {text}")


class HandlerWithoutType(Handler):
	def handle(self, text: str) -> None:
		pass


class TestHandler(TestCase):
	def setUp(self) -> None:
		logging.disable(logging.CRITICAL)
		self.mapper: Mapper = Mapper(gameWriter=Mock(), outputWriter=Mock())
		self.mapper.daemon = True  # Allow unittest to quit if mapper thread does not close properly.

	def tearDown(self) -> None:
		logging.disable(logging.NOTSET)

	def testMapper_handle(self) -> None:
		dummy: DummyHandler = DummyHandler(self.mapper)
		self.mapper.handleMudEvent(dummy.event, "Hello world")
		dummy.handleText.assert_called_once_with("I received Hello world")
		dummy.handleText.reset_mock()
		self.mapper.handleMudEvent(dummy.event, "I am here.")
		dummy.handleText.assert_called_once_with("I received I am here.")
		dummy.handleText.reset_mock()
		dummy.close()
		self.assertFalse(dummy.isRegistered)
		self.mapper.handleMudEvent(dummy.event, "Goodbye world")
		dummy.handleText.assert_not_called()
		# Closing twice is harmless.
		dummy.close()

	def test_init_withEventArgument(self) -> None:
		dummy: DummyHandler = DummyHandler(self.mapper, event="otherEvent")
		self.assertEqual(dummy.event, "otherEvent")
		self.assertIn(dummy.handle, self.mapper.mudEventHandlers["otherEvent"])
		dummy.close()

	def test_init_raisesValueErrorWhenNoEventTypeIsProvided(self) -> None:
		with self.assertRaises(ValueError):
			HandlerWithoutType(self.mapper)
