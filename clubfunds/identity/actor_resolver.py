"""
===============================================================================
TARJETA CRC - identity/actor_resolver.py
===============================================================================

Class:
    CurrentActorResolver

Responsibilities:
    - Turn the authenticated principal (or its absence) into the domain Actor
      threaded through every use case.
    - Fall back to the SYSTEM actor when no user is authenticated.
    - Attach client ip / user agent for the audit trail.

Collaborators:
    - identity.principal.Principal
    - domain.entities.Actor
===============================================================================
"""

from __future__ import annotations

from fastapi import Request

from ..domain.entities import Actor
from .principal import Principal


class CurrentActorResolver:
    def resolve(self, request: Request | None, principal: Principal | None) -> Actor:
        ip_address = None
        user_agent = None
        if request is not None:
            ip_address = request.client.host if request.client else None
            user_agent = request.headers.get("user-agent")

        if principal is None:
            return Actor(
                name=Actor.system().name, ip_address=ip_address, user_agent=user_agent
            )

        return Actor(
            name=principal.email,
            user_id=principal.user_id,
            ip_address=ip_address,
            user_agent=user_agent,
        )
