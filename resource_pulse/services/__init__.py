"""
ResourcePulse Backend - Services Package
========================================

Business logic, one stateless service per aggregate, each exposed as a
module-level singleton (e.g. `project_service`). Services receive the
request's AsyncSession, flush their writes (the session dependency commits)
and return Pydantic response models. They raise application exceptions from
`resource_pulse.exceptions` and never touch Request/Response objects.
"""
