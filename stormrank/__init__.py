"""
stormrank package
=================

Ranks NOAA storm event types by their health and economic impact.

- The CLI entry point is in `stormrank/cli.py`.
- The pipeline (filter, canonicalize, resolve damages, aggregate) is run by `stormrank/engine.py`.
- The ordered event-type rules are in `stormrank/rules.py`.
- Dataset loading is in `stormrank/loader.py`.
"""

__version__ = '0.1.0'
