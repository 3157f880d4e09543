"""
routers/ — FastAPI routers, one per API namespace

Each router keeps HTTP concerns only (auth dependencies, request models,
rate limits, notifications after commit) and delegates business rules to
services/. Mounted by main.py.
"""
