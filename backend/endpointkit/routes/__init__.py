# Routes package init
"""
EndpointKit: Built-in Endpoints
=================================

Endpoint Inventory:
    - health.py:  GET /health  (liveness probe, mounted by create_app)
"""
