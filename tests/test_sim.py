import logging

import pytest

from runwaysim.config import Config, ConfigError
from runwaysim.agents.core import EventBus, FrameLogSubscriber, PLANE_CRASHED, PLANE_HALTED, PLANE_LANDED, PLANE_LANDING
from runwaysim.orchestrator.sim import Simulation, run_trial


def test_single_plane_lands_with_fuel_to_spare(scripted):
	cfg = Config(frame_horizon=200)
	sim = Simulation(cfg, control=True, random_source=scripted({1: 100}), bus=EventBus())
	result = sim.run()
	plane = sim.airplanes[0]
	assert plane.landed and not plane.crashed
	# one liter burns on the arrival frame before the landing starts
	assert plane.fuel == 19
	assert result.crash_count == 0 and result.landed_count == 1 and result.spawned_count == 1
	log = sim.event_log()
	assert list(log["type"]) == ["plane.entered", PLANE_LANDING, PLANE_LANDED]
	assert log.loc[log["type"] == PLANE_LANDED, "frame"].item() == 81


def test_plane_crashes_on_the_frame_its_fuel_runs_out(scripted):
	cfg = Config(frame_horizon=100, min_fuel=1)
	sim = Simulation(cfg, control=True, random_source=scripted({1: 50}), bus=EventBus())
	for _ in range(49):
		sim.step()
	assert not sim.airplanes[0].crashed
	sim.step()
	assert sim.airplanes[0].crashed
	assert sim.airplanes[0].fuel == 0
	sim.run()
	log = sim.event_log()
	assert log.loc[log["type"] == PLANE_CRASHED, "frame"].tolist() == [50]
	assert sim.crash_count() == 1


def test_test_group_preempts_comfortable_lander(scripted):
	cfg = Config(frame_horizon=300)
	arrivals = {1: 900, 11: 100}
	control = Simulation(cfg, control=True, random_source=scripted(arrivals))
	test = Simulation(cfg, control=False, random_source=scripted(arrivals), bus=EventBus())

	control_result = control.run()
	test_result = test.run()

	# control: plane 2 waits 70 frames with 100 liters and cannot land in time
	assert control_result.crash_count == 1
	assert test_result.crash_count == 0
	assert test_result.preemptions == 1

	log = test.event_log()
	halted = log[log["type"] == PLANE_HALTED]
	assert halted["plane"].tolist() == [1]
	assert halted["frame"].tolist() == [11]
	assert halted["by"].tolist() == [2]
	# the halted plane keeps its progress: 10 frames of descent done
	assert halted["altitude"].tolist() == [70]


def test_terminal_planes_never_change():
	cfg = Config(frame_horizon=3000, spawn_probability=0.05, seed=7)
	sim = Simulation(cfg, control=False)
	frozen = {}
	while not sim.complete:
		sim.step()
		for plane in sim.airplanes:
			if plane.is_terminal:
				assert not (plane.landed and plane.crashed)
				snapshot = repr(plane)
				assert frozen.setdefault(plane.plane_number, snapshot) == snapshot


@pytest.mark.parametrize("runways,control", [(1, True), (1, False), (3, True), (3, False)])
def test_landing_planes_never_exceed_runways(runways, control):
	cfg = Config(frame_horizon=3000, spawn_probability=0.05, num_runways=runways, seed=3)
	sim = Simulation(cfg, control=control)
	while not sim.complete:
		decision = sim.step()
		landing = sum(1 for plane in sim.airplanes if plane.landing)
		assert landing == decision.landing_count
		assert landing <= runways


def test_at_most_one_preemption_per_frame():
	cfg = Config(frame_horizon=5000, spawn_probability=0.05, seed=11)
	sim = Simulation(cfg, control=False, bus=EventBus())
	sim.run()
	log = sim.event_log()
	halted = log[log["type"] == PLANE_HALTED]
	assert len(halted) == sim.preemptions
	assert sim.preemptions > 0
	assert halted["frame"].is_unique


def test_control_group_never_preempts():
	cfg = Config(frame_horizon=5000, spawn_probability=0.05, seed=11)
	result = Simulation(cfg, control=True).run()
	assert result.preemptions == 0


def test_disabled_reprioritization_turns_test_group_into_baseline():
	cfg = Config(frame_horizon=4000, spawn_probability=0.03, seed=5, enable_reprioritization=False)
	assert Simulation(cfg, control=False).run().preemptions == 0


def test_fixed_seed_is_deterministic():
	cfg = Config(seed=1234)
	first = run_trial(cfg, 3)
	second = run_trial(cfg, 3)
	assert first == second
	assert first.spawned_count > 0


def test_plane_numbers_follow_arrival_order():
	cfg = Config(frame_horizon=2000, seed=9)
	sim = Simulation(cfg, control=False)
	sim.run()
	assert [p.plane_number for p in sim.airplanes] == list(range(1, len(sim.airplanes) + 1))
	assert all(p.fuel < cfg.max_fuel for p in sim.airplanes)
	assert all(p.fuel == 0 for p in sim.airplanes if p.crashed)


def test_even_trials_are_control():
	cfg = Config(frame_horizon=10)
	assert run_trial(cfg, 2).control
	assert not run_trial(cfg, 1).control


def test_completed_trial_cannot_rerun():
	sim = Simulation(Config(frame_horizon=5), control=True)
	sim.run()
	assert sim.frame_number == 5
	with pytest.raises(RuntimeError):
		sim.run()


def test_completed_trial_cannot_step():
	sim = Simulation(Config(frame_horizon=3, spawn_probability=0.0), control=True)
	sim.run()
	with pytest.raises(RuntimeError):
		sim.step()
	assert sim.frame_number == 3


def test_empty_horizon_runs_without_frames():
	sim = Simulation(Config(frame_horizon=0), control=True)
	assert sim.run().spawned_count == 0
	with pytest.raises(RuntimeError):
		sim.step()


@pytest.mark.parametrize(
	"overrides",
	[
		{"num_runways": 0},
		{"num_runways": -2},
		{"spawn_probability": -0.01},
		{"spawn_probability": 1.5},
		{"min_fuel": 500, "max_fuel": 400},
		{"fuel_rate": 0},
	],
)
def test_invalid_config_fails_at_construction(overrides):
	with pytest.raises(ConfigError):
		Simulation(Config(**overrides), control=True)


@pytest.mark.parametrize("p", [0.0, 1.0])
def test_spawn_probability_bounds_are_valid(p):
	result = Simulation(Config(frame_horizon=50, spawn_probability=p), control=True).run()
	assert result.spawned_count == (50 if p == 1.0 else 0)


def test_frame_log_subscriber_renders_events(scripted):
	records = []

	class ListHandler(logging.Handler):
		def emit(self, record):
			records.append(record.getMessage())

	logger = logging.getLogger("runwaysim.tests.frames")
	logger.setLevel(logging.DEBUG)
	logger.addHandler(ListHandler())
	logger.propagate = False

	bus = EventBus(keep_log=False)
	FrameLogSubscriber(logger).attach(bus)
	Simulation(Config(frame_horizon=100), control=True, random_source=scripted({3: 250}), bus=bus).run()

	assert records[0] == "[Frame #0003] Plane 1 entered airspace with 250 liters of fuel"
	assert records[1].startswith("[Frame #0003] Plane 1 is landing")
	assert records[-1] == "[Frame #0083] Plane 1 landed with 169 liters of fuel left"
	assert bus.log == []


def test_frame_log_subscriber_filters_event_types(scripted):
	records = []

	class ListHandler(logging.Handler):
		def emit(self, record):
			records.append(record.getMessage())

	logger = logging.getLogger("runwaysim.tests.crashes")
	logger.setLevel(logging.DEBUG)
	logger.addHandler(ListHandler())
	logger.propagate = False

	bus = EventBus(keep_log=False)
	FrameLogSubscriber(logger).attach(bus, [PLANE_CRASHED])
	Simulation(Config(frame_horizon=100, min_fuel=1), control=True, random_source=scripted({1: 30, 2: 400}), bus=bus).run()

	assert records == ["[Frame #0030] Plane 1 crashed"]


def test_waiting_planes_feed_arbitration(scripted):
	sim = Simulation(Config(frame_horizon=10), control=True, random_source=scripted({1: 300, 2: 200}))
	sim.step()
	sim.step()
	first, second = sim.airplanes
	assert first.landing and not first.is_waiting
	assert second.is_waiting
