"""
DCE package
===========

This package contains the Damage Curve Engine (DCE): expected damage ratios
for buildings exposed to earthquake, flood, volcanic and landslide hazards,
read off pre-computed fragility/vulnerability curves.

- The CLI entry point is in `dce/cli.py`.
- The query engine (batch damage lookup, nearest point, export) is in `dce/engine.py`.
- Curve validation and storage is in `dce/store.py`.
- Data providers (JSON / HTTP / spreadsheet) are in `dce/loader.py`.
"""

__version__ = '0.1.0'
