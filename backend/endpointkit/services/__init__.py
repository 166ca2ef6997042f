# Services package init
"""
EndpointKit: Services Layer
=============================

What:  The pluggable pieces the lifecycle engine composes.

Service Inventory:
    - validation.py:    Validator contract, PydanticValidator, FunctionValidator
    - request_data.py:  body / query / params / headers → RequestData
    - dispatcher.py:    ResponseDispatcher (JSON, FILE, STREAM) and stream_file()

Why services are separate from the engine:
    1. Testability: each piece is unit-tested without a running app
    2. Replaceability: an endpoint can take its own ResponseDispatcher
    3. Single responsibility: the engine only fixes the order of the steps
"""
