"""
Service-level routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> Response:
    return Response(status_code=status.HTTP_200_OK)
