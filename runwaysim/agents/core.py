from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Dict, Callable, Any, Sequence

from runwaysim.utils.logging import frame_message


PLANE_ENTERED = "plane.entered"
PLANE_LANDING = "plane.landing"
PLANE_HALTED = "plane.halted"
PLANE_LANDED = "plane.landed"
PLANE_CRASHED = "plane.crashed"
PLANE_EVENTS = (PLANE_ENTERED, PLANE_LANDING, PLANE_HALTED, PLANE_LANDED, PLANE_CRASHED)


@dataclass
class Event:
	type: str
	payload: Dict[str, Any]
	frame: int


class EventBus:
	def __init__(self, keep_log: bool = True) -> None:
		self.subscribers: Dict[str, List[Callable[[Event], None]]] = {}
		self.catch_all: List[Callable[[Event], None]] = []
		self.keep_log = keep_log
		self.log: List[Event] = []

	def subscribe(self, event_type: str, handler: Callable[[Event], None]) -> None:
		self.subscribers.setdefault(event_type, []).append(handler)

	def subscribe_all(self, handler: Callable[[Event], None]) -> None:
		self.catch_all.append(handler)

	def publish(self, evt: Event) -> None:
		if self.keep_log:
			self.log.append(evt)
		for handler in self.subscribers.get(evt.type, []):
			handler(evt)
		for handler in self.catch_all:
			handler(evt)


class FrameLogSubscriber:
	"""Render plane events as frame-prefixed log lines."""

	def __init__(self, logger: logging.Logger, level: int = logging.DEBUG) -> None:
		self.logger = logger
		self.level = level

	def attach(self, bus: EventBus, event_types: Sequence[str] = ()) -> "FrameLogSubscriber":
		if not event_types:
			bus.subscribe_all(self)
		for event_type in event_types:
			bus.subscribe(event_type, self)
		return self

	def __call__(self, evt: Event) -> None:
		if self.logger.isEnabledFor(self.level):
			self.logger.log(self.level, frame_message(evt.frame, describe(evt)))


def describe(evt: Event) -> str:
	p = evt.payload
	plane = p.get("plane")
	if evt.type == PLANE_ENTERED:
		return f"Plane {plane} entered airspace with {p['fuel']} liters of fuel"
	if evt.type == PLANE_LANDING:
		return f"Plane {plane} is landing ({p['fuel']} liters, altitude {p['altitude']})"
	if evt.type == PLANE_HALTED:
		return f"Plane {plane} landing has been halted for plane {p['by']}"
	if evt.type == PLANE_LANDED:
		return f"Plane {plane} landed with {p['fuel']} liters of fuel left"
	if evt.type == PLANE_CRASHED:
		return f"Plane {plane} crashed"
	return f"{evt.type} {p}"
