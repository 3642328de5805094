"""Service layer for business logic.

Services encapsulate all business logic, keeping routes thin and focused
on HTTP handling.

Layer hierarchy:
    Routes (HTTP) -> Services (Business Logic) -> Repositories (Database)
    Services -> Rendering (SVG, QR, rasterization)

Services should:
- Contain all business rules and validation
- Orchestrate calls to repositories and the rendering module
- Raise domain exceptions that routes translate to HTTP responses

Services should NOT:
- Directly execute SQL queries (use repositories)
- Know about HTTP request/response details
"""
