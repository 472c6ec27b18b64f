import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from driveshare.api.api_v1.api import api_router
from driveshare.core.config import settings
from driveshare.core.errors import DriveShareError, StoreUnavailable
from driveshare.db.base import Base
from driveshare.db.session import engine

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create tables for development (in production use migrations)
Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], # In production, replace with specific origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

app.include_router(api_router, prefix=settings.API_PREFIX)

@app.get("/")
def read_root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}"}

@app.middleware("http")
async def clear_stale_credential(request: Request, call_next):
    response = await call_next(request)
    if getattr(request.state, "clear_credential", False):
        logger.info("Clearing stale credential cookie on %s %s", request.method, request.url.path)
        response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return response

@app.exception_handler(DriveShareError)
async def driveshare_exception_handler(request: Request, exc: DriveShareError):
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

@app.exception_handler(SQLAlchemyError)
async def store_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Store failure on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=StoreUnavailable.status_code, content=StoreUnavailable().to_payload())

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Validation Error on %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        status_code=422,
        content={"success": False, "message": "Validation Error", "detail": jsonable_errors(exc)},
    )

# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal Server Error"},
    )

def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]

if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8899)
