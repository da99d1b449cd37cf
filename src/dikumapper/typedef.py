# Copyright (c) 2025 Nick Stockton and contributors
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

# Future Modules:
from __future__ import annotations

# Built-in Modules:
from collections.abc import Callable
from queue import SimpleQueue
from typing import Union

# Third-party Modules:
from knickknacks.typedef import RePatternType, TypeAlias


COORDINATES_TYPE: TypeAlias = tuple[int, int]
GAME_WRITER_TYPE: TypeAlias = Callable[[str], None]
OUTPUT_WRITER_TYPE: TypeAlias = Callable[[str], None]
MUD_EVENT_HANDLER_TYPE: TypeAlias = Callable[[str], None]
MAPPER_EVENT_TYPE: TypeAlias = tuple[str, str]
MAPPER_QUEUE_EVENT_TYPE: TypeAlias = Union[MAPPER_EVENT_TYPE, None]
MAPPER_QUEUE_TYPE: TypeAlias = SimpleQueue[MAPPER_QUEUE_EVENT_TYPE]


__all__: list[str] = [
	"COORDINATES_TYPE",
	"GAME_WRITER_TYPE",
	"MAPPER_EVENT_TYPE",
	"MAPPER_QUEUE_EVENT_TYPE",
	"MAPPER_QUEUE_TYPE",
	"MUD_EVENT_HANDLER_TYPE",
	"OUTPUT_WRITER_TYPE",
	"RePatternType",
	"TypeAlias",
]
