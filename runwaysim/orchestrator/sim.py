from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

import pandas as pd

from runwaysim.config import Config
from runwaysim.agents.airplane import Airplane, LANDED, CRASHED
from runwaysim.agents.core import (
	Event,
	EventBus,
	PLANE_ENTERED,
	PLANE_LANDING,
	PLANE_HALTED,
	PLANE_LANDED,
	PLANE_CRASHED,
)
from runwaysim.ingestion.random_source import RandomSource, trial_seed
from runwaysim.optimization.arbitration import RunwayArbiter, FrameDecision


@dataclass
class TrialResult:
	trial_number: int
	control: bool
	crash_count: int
	landed_count: int
	spawned_count: int
	preemptions: int

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)


class Simulation:
	def __init__(
		self,
		config: Config,
		control: bool,
		trial_number: int = 1,
		random_source: Optional[RandomSource] = None,
		bus: Optional[EventBus] = None,
	) -> None:
		self.config = config.validate()
		self.control = control
		self.trial_number = trial_number
		self.random = random_source if random_source is not None else RandomSource.from_seed(trial_seed(config, trial_number))
		self.bus = bus
		self.arbiter = RunwayArbiter(
			num_runways=config.num_runways,
			reprioritize=config.enable_reprioritization and not control,
			preemption_reserve=config.preemption_reserve,
		)
		self.airplanes: List[Airplane] = []
		self.frame_number = 0
		self.preemptions = 0

	@property
	def complete(self) -> bool:
		return self.frame_number >= self.config.frame_horizon

	def run(self) -> TrialResult:
		if self.complete and self.frame_number > 0:
			raise RuntimeError(f"Trial {self.trial_number} already ran to frame {self.frame_number}.")
		while not self.complete:
			self.step()
		return self.result()

	def step(self) -> FrameDecision:
		if self.complete:
			raise RuntimeError(f"Trial {self.trial_number} already ran to frame {self.frame_number}.")
		self.frame_number += 1
		self._spawn()

		for plane in self.airplanes:
			if plane.landed:
				continue
			outcome = plane.advance()
			if outcome == LANDED:
				self._publish(PLANE_LANDED, plane=plane.plane_number, fuel=plane.fuel)
			elif outcome == CRASHED:
				self._publish(PLANE_CRASHED, plane=plane.plane_number)

		decision = self.arbiter.arbitrate(self.airplanes)
		if decision.preempted is not None:
			self.preemptions += 1
			halted = self.airplanes[decision.preempted]
			self._publish(
				PLANE_HALTED,
				plane=halted.plane_number,
				fuel=halted.fuel,
				altitude=halted.altitude,
				by=self.airplanes[decision.admitted].plane_number,
			)
		if decision.admitted is not None:
			plane = self.airplanes[decision.admitted]
			self._publish(PLANE_LANDING, plane=plane.plane_number, fuel=plane.fuel, altitude=plane.altitude)
		return decision

	def _spawn(self) -> None:
		if not self.random.should_spawn(self.config.spawn_probability):
			return
		plane = Airplane(
			plane_number=len(self.airplanes) + 1,
			fuel=self.random.initial_fuel(self.config.min_fuel, self.config.max_fuel),
			fuel_rate=self.config.fuel_rate,
			altitude=self.config.approach_altitude,
		)
		self.airplanes.append(plane)
		self._publish(PLANE_ENTERED, plane=plane.plane_number, fuel=plane.fuel)

	def _publish(self, event_type: str, **payload: Any) -> None:
		if self.bus is not None:
			self.bus.publish(Event(event_type, payload, self.frame_number))

	def crash_count(self) -> int:
		return sum(1 for plane in self.airplanes if plane.crashed)

	def result(self) -> TrialResult:
		return TrialResult(
			trial_number=self.trial_number,
			control=self.control,
			crash_count=self.crash_count(),
			landed_count=sum(1 for plane in self.airplanes if plane.landed),
			spawned_count=len(self.airplanes),
			preemptions=self.preemptions,
		)

	def event_log(self) -> pd.DataFrame:
		if self.bus is None or not self.bus.log:
			return pd.DataFrame(columns=["frame", "type", "plane"])
		return pd.DataFrame([{"frame": e.frame, "type": e.type, **e.payload} for e in self.bus.log])


def run_trial(config: Config, trial_number: int) -> TrialResult:
	"""Run one independent trial; even-numbered trials form the control group."""
	sim = Simulation(config, control=trial_number % 2 == 0, trial_number=trial_number)
	return sim.run()
