"""Adapters - Infrastructure implementations of core interfaces.

This package contains the concrete implementations of the
Protocol interfaces defined in the core module.

Adapters are organized by type:
- db/: Application database pool and schema (asyncpg)
- rbac/: Team membership storage
- invites/: Invite storage with atomic consumption
- audit/: Append-only audit log of privileged actions
"""
