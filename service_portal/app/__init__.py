"""
Portal Service package for the Finlogic website.

Provides the data-access layer behind the public site and admin screens:

- app.main: API surface for profiles, admin CRUD, cache diagnostics.
- app.caching: TTL store, cache keys and the read-through query cache.
- app.repositories: Profile and admin reads/writes with write-path invalidation.
- app.adapters: Supabase (PostgREST) data store adapter.

Guidelines:
- Cache only reads; writes go to the store and invalidate afterwards.
- Never cache failures; never swallow data store errors.
"""
