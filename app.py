"""
app.py

ThermoSense dashboard: simulated battery temperature vs ambient weather.

How to run (from project root):
    streamlit run app.py

The monitor has no background thread here: each rerun ticks it once the
tick interval (5 s by default) has passed since the latest observation.
"""

from __future__ import annotations

import time
from typing import Any, Dict

import matplotlib.pyplot as plt
import streamlit as st

from thermosense.chart import render_figure
from thermosense.config import DEFAULT_CONFIG_PATH, load_params
from thermosense.display import meter_color, meter_percent
from thermosense.export import ExportError
from thermosense.monitor import ThermoMonitor


# -----------------------------------------------------------------------------#
# Setup
# -----------------------------------------------------------------------------#
st.set_page_config(page_title="ThermoSense", layout="wide")


@st.cache_resource
def _get_params() -> Dict[str, Any]:
    return load_params(DEFAULT_CONFIG_PATH)


params = _get_params()

if "monitor" not in st.session_state:
    monitor = ThermoMonitor(params, background=False)
    lat = monitor.ambient_cfg["latitude"]
    lon = monitor.ambient_cfg["longitude"]
    if lat is not None and lon is not None:
        monitor.request_ambient(float(lat), float(lon))
    monitor.start()
    st.session_state.monitor = monitor

monitor: ThermoMonitor = st.session_state.monitor
monitor.tick_if_due()

st.title("ThermoSense")
st.caption("Ambient-Aware Battery Health Advisor")

# -----------------------------------------------------------------------------#
# Sidebar: ambient source
# -----------------------------------------------------------------------------#
st.sidebar.header("Ambient temperature")
st.sidebar.caption("Current 2 m temperature from Open-Meteo. Until a reading arrives the default is used.")
lat_in = st.sidebar.number_input("Latitude", min_value=-90.0, max_value=90.0, value=41.01, step=0.01, format="%.4f")
lon_in = st.sidebar.number_input("Longitude", min_value=-180.0, max_value=180.0, value=28.98, step=0.01, format="%.4f")
if st.sidebar.button("Fetch weather", use_container_width=True):
    monitor.request_ambient(float(lat_in), float(lon_in))
    st.sidebar.info("Request sent. The next tick uses the new reading if it succeeds.")

st.sidebar.divider()
manual = st.sidebar.number_input("Manual ambient [°C]", value=float(monitor.ambient_c), step=0.5)
if st.sidebar.button("Apply manual ambient", use_container_width=True):
    monitor.set_ambient(float(manual))

st.sidebar.divider()
refresh_s = st.sidebar.number_input("Page refresh [s]", min_value=0.5, max_value=30.0, value=1.0, step=0.5)

# -----------------------------------------------------------------------------#
# Cards
# -----------------------------------------------------------------------------#
risk = monitor.current_risk()

c1, c2, c3 = st.columns(3)
with c1:
    st.metric("Battery Temperature", monitor.display_temperature(monitor.state.device_temp_c))
with c2:
    st.metric(
        "Ambient (Weather)" if monitor.state.ambient.has_reading else "Ambient (default)",
        monitor.display_temperature(monitor.ambient_c),
    )
with c3:
    st.metric("Risk", risk.level.value.upper())

# -----------------------------------------------------------------------------#
# Severity meter + advice
# -----------------------------------------------------------------------------#
pct = meter_percent(risk.score)
st.markdown(
    f"""
<div style="background:#111827;border:1px solid #1f2937;border-radius:8px;height:16px;overflow:hidden">
  <div style="width:{pct}%;height:100%;background:{meter_color(risk.level)}"></div>
</div>
<div style="display:flex;justify-content:space-between;font-size:12px;opacity:.8;margin-top:6px">
  <span>Safe</span><span>Caution</span><span>Danger</span>
</div>
""",
    unsafe_allow_html=True,
)

st.subheader("Advice")
st.write(risk.advice)

# -----------------------------------------------------------------------------#
# Chart
# -----------------------------------------------------------------------------#
fig = render_figure(monitor.chart())
st.pyplot(fig)
plt.close(fig)

# -----------------------------------------------------------------------------#
# Controls
# -----------------------------------------------------------------------------#
b1, b2, b3 = st.columns(3)
with b1:
    if st.button("Pause" if monitor.running else "Resume", use_container_width=True):
        monitor.toggle_running()
        st.rerun()
with b2:
    if st.button("Toggle °C / °F", use_container_width=True):
        monitor.toggle_units()
        st.rerun()
with b3:
    try:
        payload = monitor.export_json()
    except ExportError as e:
        st.error(f"Export failed: {e}")
    else:
        st.download_button(
            "Download JSON Log",
            data=payload,
            file_name=monitor.export_filename,
            mime="application/json",
            use_container_width=True,
        )

with st.expander("Recent observations", expanded=False):
    st.dataframe(monitor.buffer.to_frame().tail(monitor.chart_window), use_container_width=True)

st.caption(
    f"{len(monitor.buffer)}/{monitor.buffer.capacity} observations | "
    f"tick={monitor.tick_interval_s:g}s | "
    f"{'RUNNING' if monitor.running else 'PAUSED'} | "
    "Rule-based tips; can be swapped with an LLM prompt."
)

if monitor.running:
    time.sleep(float(refresh_s))
    st.rerun()
