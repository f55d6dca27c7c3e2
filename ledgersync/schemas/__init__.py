"""
Pydantic schemas and enums shared across the sync layer.

These models define the result contracts returned by the coordinator,
verification and reset services, the event payloads published on the bus,
and the request/response bodies of the HTTP surface.
"""
