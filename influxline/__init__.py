"""Parse, build and serialise InfluxDB line protocol points."""

__version__ = "0.1.0"