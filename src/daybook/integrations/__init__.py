"""Backends implementing the journal ports.

- :mod:`daybook.integrations.local` — JSON files on disk (default).
- :mod:`daybook.integrations.supabase` — hosted table plus auth over REST.
"""
