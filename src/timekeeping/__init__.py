"""Timekeeping core package.

Organised by feature module (attendance, payroll, ...) with thin protocol
seams towards the remote API and the local durable store.
"""

__version__ = "0.1.0"
