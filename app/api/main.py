from fastapi import APIRouter

from app.api.routers import receipts

api_router = APIRouter(prefix="/api")

api_router.include_router(receipts.router, prefix="/receipts", tags=["Receipts"])
