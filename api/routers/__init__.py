"""
API Routers - Organized endpoint handlers for the management API.

Each router handles a specific domain:
- archive: PV archive requests and the pending workflow queue
"""
