"""
Runtime package for the PrintDesk background process.

This package contains:
- API layer (FastAPI server + command/event routes)
- Registry (command dispatch with error isolation and notifications)
- Stores (log store + throttled log update notifier)
- Models (Pydantic models for log entries, results and notifications)
- Context (wires everything together with start/shutdown)
"""
