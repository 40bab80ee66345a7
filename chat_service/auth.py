"""Identity handed over by the upstream authentication gateway."""

from typing import Optional
from uuid import UUID

from fastapi import Header, HTTPException

USER_ID_HEADER = "X-User-Id"


async def get_current_user_id(
    x_user_id: Optional[str] = Header(None, alias=USER_ID_HEADER),
) -> UUID:
    """Dependency returning the authenticated user's ID."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Unauthorized")
