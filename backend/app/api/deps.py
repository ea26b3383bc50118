"""Request-scoped dependencies shared by the routers."""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import Header, HTTPException, status

from app.core.context import user_id_ctx_var


async def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> UUID:
    """Caller identity from the ``X-User-Id`` header.

    Async so the context variable is set in the request's own context and the
    log filter can see it.
    """
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-Id header")
    try:
        user_id = UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid X-User-Id header")
    user_id_ctx_var.set(str(user_id))
    return user_id
