"""OD Tracker package.

Organized by feature modules (users, events, requests, attendance) with a thin
Flask controller layer over service and repository layers.
"""
