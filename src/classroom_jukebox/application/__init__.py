"""
Application Layer

Contains the application services that orchestrate domain objects and
infrastructure adapters.

Structure:
- services/: Queue reconciliation, queue façade, ban voting, broadcasting, sync job
- interfaces/: Port interfaces for infrastructure adapters
"""
