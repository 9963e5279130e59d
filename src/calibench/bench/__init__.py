"""Measurement pipeline for calibench.

Calibrates the cost of a unit of work, schedules and runs sampled
measurements, summarizes them, and compares against the previous run
persisted under the same label.
"""
