from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from svc_teammate.domain.categories import get_category, list_categories

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("")
@router.get("/")
async def categories():
    return {"success": True, "data": [c.to_view() for c in list_categories()]}


@router.get("/{category_id}")
async def category(category_id: str):
    c = get_category(category_id)
    if c is None:
        return JSONResponse(status_code=404, content={"success": False, "error": "Category not found"})
    return {"success": True, "data": c.to_view()}
