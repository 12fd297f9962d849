from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from runwaysim.agents.airplane import Airplane


@dataclass
class FrameDecision:
	admitted: Optional[int] = None   # index of the plane that started landing
	preempted: Optional[int] = None  # index of the lander that was halted
	landing_count: int = 0           # planes on approach after the decision


class RunwayArbiter:
	"""Decides once per frame which planes get a runway.

	Planes are referred to by their index in the trial's airplane list. The
	waiting plane with the least fuel that can still cover its remaining
	descent is the best candidate; ties go to the earlier arrival. It is
	admitted when a runway is free. With reprioritization on and every runway
	busy, the best candidate may instead take over the runway of the lander
	carrying the most fuel, provided that lander can afford to wait out
	another full approach.

	Control trials get the same ``num_runways`` slots; they only differ in
	never preempting. With one runway that means admitting only while no
	plane is landing.

	Only one admission happens per frame even when several runways are free,
	so freed runways fill one frame at a time.
	"""

	def __init__(
		self,
		num_runways: int = 1,
		reprioritize: bool = False,
		preemption_reserve: int = 81,
	) -> None:
		self.num_runways = num_runways
		self.reprioritize = reprioritize
		self.preemption_reserve = preemption_reserve

	def arbitrate(self, airplanes: List[Airplane]) -> FrameDecision:
		landing: List[int] = []
		candidate: Optional[int] = None
		for idx, plane in enumerate(airplanes):
			if plane.landing:
				landing.append(idx)
			elif plane.is_waiting and plane.fuel >= plane.altitude:
				if candidate is None or plane.fuel < airplanes[candidate].fuel:
					candidate = idx

		decision = FrameDecision(landing_count=len(landing))
		if candidate is None:
			return decision

		available = self.num_runways - len(landing)
		if available > 0:
			airplanes[candidate].landing = True
			decision.admitted = candidate
			decision.landing_count += 1
		elif self.reprioritize and landing:
			lander = self._most_fueled(airplanes, landing)
			if self.should_preempt(airplanes[lander], airplanes[candidate]):
				airplanes[lander].landing = False
				airplanes[candidate].landing = True
				decision.admitted = candidate
				decision.preempted = lander
		return decision

	def should_preempt(self, lander: Airplane, candidate: Airplane) -> bool:
		# The halted lander must still be able to wait one full approach and then finish its own
		return candidate.fuel < lander.fuel and lander.fuel >= self.preemption_reserve + lander.altitude

	@staticmethod
	def _most_fueled(airplanes: List[Airplane], landing: List[int]) -> int:
		best = landing[0]
		for idx in landing[1:]:
			if airplanes[idx].fuel > airplanes[best].fuel:
				best = idx
		return best
