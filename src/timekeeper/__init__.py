"""Timekeeper package.

Time tracking and payroll calculation, organized by feature modules
(users, timeentries, payroll) with a thin Flask controller layer over
service/repository layers.
"""
