from __future__ import annotations

import streamlit as st
import plotly.express as px

from runwaysim.config import Config, ConfigError
from runwaysim.agents.core import EventBus
from runwaysim.orchestrator.runner import TrialRunner
from runwaysim.orchestrator.sim import Simulation


st.set_page_config(page_title="Runway Reprioritization", layout="wide")
st.title("Runway Reprioritization Experiment")

with st.sidebar:
	st.header("Parameters")
	num_trials = st.slider("Trials", 2, 200, 20, step=2)
	frame_horizon = st.slider("Frames per trial", 1000, 20000, 10000, step=1000)
	num_runways = st.slider("Runways", 1, 6, 1)
	spawn_probability = st.slider("Spawn probability", 0.001, 0.1, 0.01, step=0.001, format="%.3f")
	seed = st.number_input("Seed", min_value=0, value=42, step=1)
	st.divider()
	st.header("Policy")
	enable_reprioritization = st.checkbox("Reprioritize in test group", value=True)
	paired_trials = st.checkbox("Paired trials (shared arrivals)", value=True)
	workers = st.slider("Worker processes", 1, 8, 1)

cfg = Config(
	num_trials=num_trials,
	frame_horizon=frame_horizon,
	num_runways=num_runways,
	spawn_probability=spawn_probability,
	seed=int(seed),
	enable_reprioritization=enable_reprioritization,
	paired_trials=paired_trials,
	workers=workers,
)

if st.button("Run Trials"):
	try:
		st.session_state["tally"] = TrialRunner(cfg).run()
	except ConfigError as exc:
		st.error(str(exc))

tally = st.session_state.get("tally")
if tally is not None:
	col1, col2, col3 = st.columns(3)
	with col1:
		st.metric("Control crashes", tally.controls)
	with col2:
		st.metric("Test crashes", tally.tests, delta=tally.tests - tally.controls, delta_color="inverse")
	with col3:
		st.metric("Latency (s)", f"{tally.latency_seconds:.2f}")

	st.subheader("Per-group summary")
	st.dataframe(tally.summary())

	df = tally.results.assign(group=tally.results["control"].map({True: "control", False: "test"}))
	fig = px.bar(df, x="trial_number", y="crash_count", color="group", title="Crashes per trial")
	st.plotly_chart(fig, use_container_width=True)
else:
	st.info("Set parameters and click 'Run Trials' in the sidebar.")

st.divider()
st.header("Single Trial")
control = st.radio("Group", ["test", "control"], horizontal=True) == "control"
if st.button("Run Single Trial"):
	sim = Simulation(cfg, control=control, bus=EventBus())
	result = sim.run()
	st.json(result.to_dict())
	log_df = sim.event_log()
	if not log_df.empty:
		fig_events = px.scatter(log_df, x="frame", y="plane", color="type", title="Plane events by frame")
		st.plotly_chart(fig_events, use_container_width=True)
		st.subheader("Event Log")
		st.dataframe(log_df.tail(200))
