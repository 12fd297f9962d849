from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


LANDED = "landed"
CRASHED = "crashed"


@dataclass
class Airplane:
	"""A plane in the airspace, identified by its arrival order.

	Fuel is in liters and burns at ``fuel_rate`` per frame. ``altitude`` is the
	fuel still needed to finish descending; it only drops while ``landing``.
	"""

	plane_number: int
	fuel: int
	fuel_rate: int = 1
	altitude: int = 80
	landing: bool = False
	landed: bool = False
	crashed: bool = False

	@property
	def is_terminal(self) -> bool:
		return self.landed or self.crashed

	@property
	def is_waiting(self) -> bool:
		return not self.landing and not self.is_terminal

	def advance(self) -> Optional[str]:
		"""Burn one frame of fuel. Returns the terminal state reached on this tick, if any."""
		if self.is_terminal:
			return None

		self.fuel -= self.fuel_rate
		if self.landing:
			self.altitude -= self.fuel_rate
			if self.altitude <= 0:
				self.landing = False
				self.landed = True
				return LANDED
		elif self.fuel <= 0:
			self.crashed = True
			return CRASHED
		return None
