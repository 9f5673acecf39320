"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from grepbase.service import Grepbase


def get_grepbase(request: Request) -> Grepbase:
    grepbase = getattr(request.app.state, "grepbase", None)
    if grepbase is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Store is not initialized")
    return grepbase
