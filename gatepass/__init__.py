# =======================================================================================
# gatepass/__init__.py - Package Initialization
# =======================================================================================
"""
GatePass - Single-Use Access Passes

Issues single-use, optionally time-scoped passes encoded as QR codes and
redeems them at most once, even under simultaneous scans.
"""

__version__ = "1.0.0"
__author__ = "GatePass Team"
