from __future__ import annotations

import os
from fastapi import APIRouter, Request
from ..config import get_settings
from ..services.category_table import get_category_table


router = APIRouter()


@router.get("/health")
def health(request: Request):
    s = get_settings()
    return {
        "status": "ok",
        "service": s.app_name,
        "env": s.environment,
        "pid": os.getpid(),
        "cartStore": type(request.app.state.cart_store).__name__,
        "categories": list(get_category_table()),
    }
