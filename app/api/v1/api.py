"""
API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import auth, inventory

api_router = APIRouter()

# Auth (registration, login, current profile)
api_router.include_router(auth.router)

# Products, soft delete, goods receipt
api_router.include_router(inventory.router)
