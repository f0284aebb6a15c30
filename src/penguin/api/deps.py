"""Shared FastAPI dependencies."""

from fastapi import Header, HTTPException


async def require_caller(x_caller: str = Header(None)) -> str:
    """Caller address, as authenticated by the execution environment."""
    if not x_caller or not x_caller.strip():
        raise HTTPException(status_code=401, detail="Missing X-Caller header")
    return x_caller.strip()
