"""
BottleNet Backend: Application Package
========================================

"Message in a bottle" backend: users send short messages that land with a
random other user, who can respond, drop the bottle back into the sea
(re-route it) or keep it.

Layers:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Routing, threading, keep
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │     DocumentStore (Persistence)     │  ← Collection-style gateway
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
