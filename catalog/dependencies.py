"""FastAPI dependencies for the resource store."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from catalog.store import ResourceStore


def get_store(request: Request) -> ResourceStore:
    """Get the store owned by the running application."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Resource store not connected")
    return store


# Type alias for store dependency
StoreDep = Annotated[ResourceStore, Depends(get_store)]
