"""ThermoSense: ambient-aware battery temperature monitor."""

__version__ = "0.1.0"
