"""
Boundary layer for external system integrations.

Handles all interactions with external systems (the relational database
and the Supabase mirror store). Provides ORM models, CRUD classes and
clients for infrastructure dependencies.
"""
