"""Patrol Attendance package.

Site attendance for security guards: QR scan check-in/check-out, operator
reconciliation of abandoned sessions and the scheduled reconciliation jobs.
Organized by feature modules with a thin Flask controller layer on top of
service/repository layers.
"""
