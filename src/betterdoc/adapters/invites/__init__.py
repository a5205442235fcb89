"""Invite storage adapters."""

from betterdoc.adapters.invites.memory import InMemoryInviteRepository
from betterdoc.adapters.invites.postgres import InvitesRepository

__all__ = ["InMemoryInviteRepository", "InvitesRepository"]
