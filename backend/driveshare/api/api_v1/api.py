from fastapi import APIRouter

from driveshare.api.api_v1.endpoints import login, users, files, shares

api_router = APIRouter()
api_router.include_router(login.router, prefix="/user", tags=["login"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(files.router, tags=["files"])
api_router.include_router(shares.router, tags=["shares"])
