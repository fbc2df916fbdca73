"""
Coffee API - Application Package
=================================

Layered layout:

    ┌─────────────────────────────────────┐
    │      Startup (coffee_api.startup)   │  ← parameters → DB → schema → listener
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Services (Validation & Data)   │  ← CoffeeService, ParameterResolver
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy engine/sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
