# Schemas package init
"""
EndpointKit: Schemas Package
==============================

What:  Pydantic models shared across the pipeline.

Schema Inventory:
    - pipeline.py:   FieldError, RequestData, ResponseEnvelope
    - responses.py:  ErrorResponse, HealthResponse
"""
