"""
Request-scoped access to the LineageService attached at startup
"""
from fastapi import Request

from ..services import LineageService


def get_lineage_service(request: Request) -> LineageService:
    return request.app.state.lineage
