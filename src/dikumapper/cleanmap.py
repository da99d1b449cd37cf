# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.


# Future Modules:
from __future__ import annotations

# Built-in Modules:
import logging
import re

# Local Modules:
from .mudevents import Handler
from .typedef import RePatternType


NO_EXIT_REGEX: RePatternType = re.compile(
	"|".join(
		[
			r"\bcannot go that way",
			r"\bcan't go that way",
			r"\bThere is no exit in that direction",
		]
	),
	flags=re.IGNORECASE,
)


logger: logging.Logger = logging.getLogger(__name__)


class FailedMoveCleaner(Handler):
	"""
	Implements an event handler that removes exits which lead nowhere.

	When the game refuses a pending movement because there is no exit in that direction,
	the exit is deleted from the current room so that path finding never uses it again.
	"""

	event: str = "line"

	def handle(self, text: str) -> None:
		"""
		Handles the incoming text from the game.

		Args:
			text: The received text from the game.
		"""
		direction: str = self.mapper.pendingMovement
		if not direction or NO_EXIT_REGEX.search(text) is None:
			return
		self.mapper.pendingMovement = ""
		if self.mapper.removeExit(direction):
			self.mapper.output(f"Removed exit '{direction}' from the current room. It leads nowhere.")
		else:
			logger.debug(f"Movement {direction} failed, but the current room has no such exit.")
		self.mapper.movementFailed(direction)
