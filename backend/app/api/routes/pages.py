"""
Page routes for web interface
"""
from fastapi import APIRouter, Request

from app.inertia import render

router = APIRouter(tags=["pages"])


@router.get("/", name="welcome")
async def welcome(request: Request):
    """Landing page"""
    return await render(request, "Welcome")
