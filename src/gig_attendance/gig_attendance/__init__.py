"""Gig attendance package.

Recurring shift generation and geofenced time tracking for a gig-labor
marketplace, organized by feature modules (schedules, attendance, reporting,
...) with a thin Flask controller layer over service/repository layers.
"""
