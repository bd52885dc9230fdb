"""Timekeeping package.

Punch-in/punch-out recording, shift metric derivation and daily/weekly
aggregation, organized by feature module (attendance, metrics, summaries, ...)
with a thin Flask controller layer over service/repository layers.
"""
