# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional


if TYPE_CHECKING:  # pragma: no cover
	# Prevent cyclic import.
	from .mapper import Mapper


class Handler(ABC):
	"""
	Implements the base class of handlers for text received from the game.

	Subclasses declare the event they handle in an event attribute, or receive it when initialised.
	"""

	event: str

	def __init__(self, mapper: Mapper, event: Optional[str] = None) -> None:
		"""
		Registers the handler with a mapper.

		Args:
			mapper: The mapper that dispatches events.
			event: The event name. May be omitted if the subclass defines an event attribute.
		"""
		self.mapper: Mapper = mapper
		if event:
			self.event = event
		elif not hasattr(self, "event"):
			raise ValueError(
				"Tried to initialise handler without an event type."
				+ " Either pass event=MyEventType when initialising, "
				+ "or declare self.event in the class definition."
			)
		self.isRegistered: bool = True
		self.mapper.registerMudEventHandler(self.event, self.handle)

	def close(self) -> None:
		"""Stops the handler from receiving events."""
		if getattr(self, "isRegistered", False):
			self.isRegistered = False
			self.mapper.deregisterMudEventHandler(self.event, self.handle)

	def __del__(self) -> None:
		self.close()

	@abstractmethod
	def handle(self, text: str) -> None:
		"""
		Called when the event is dispatched.

		Args:
			text: The ANSI stripped text received from the game.
		"""
