# main.py
"""
RentEase API application.

Creates the FastAPI app, wires CORS and the routers, and turns every error
into a `{"error": message}` JSON body.
"""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from database import check_connection
from errors import RentEaseError
from routers import all_routers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
     config.setup_logging()
     logger.info("RentEase API starting")
     yield
     logger.info("RentEase API shutting down")


# App instance
app = FastAPI(title="RentEase API", lifespan=lifespan)

# CORS
app.add_middleware(
     CORSMiddleware,
     allow_origins=config.CORS_ORIGINS,
     allow_credentials=True,
     allow_methods=["*"],
     allow_headers=["*"],
)

for router in all_routers:
     app.include_router(router)


@app.exception_handler(RentEaseError)
async def rentease_error_handler(request: Request, exc: RentEaseError):
     if exc.status_code >= 500:
          logger.error("%s on %s %s: %s %s", type(exc).__name__, request.method, request.url.path, exc.message, exc.context)
     else:
          logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
     return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
     # 404 Fallback
     if exc.status_code == 404 and exc.detail == "Not Found":
          return JSONResponse(status_code=404, content={"error": "Route not found"})
     return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
     return JSONResponse(
          status_code=422,
          content={"error": "Validation failed", "details": jsonable_encoder(exc.errors())},
     )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
     logger.exception("Unhandled error on %s %s", request.method, request.url.path)
     return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/health", tags=["health"])
def health():
     database = "ok" if check_connection() else "unavailable"
     return {"status": "ok", "database": database}


if __name__ == "__main__":
     uvicorn.run("main:app", host="0.0.0.0", port=config.PORT, reload=True)
