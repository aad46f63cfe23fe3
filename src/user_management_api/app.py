import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from user_management_api.models.base import init_db
from user_management_api.routers.users import router as users_router
from user_management_api.services.accounts import INVALID_LOGIN_MODEL_MESSAGE

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

TOKEN_PATH = "/users/token"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="User Management API", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Report request validation failures as 400 Bad Request.

    The token endpoint answers with a fixed message so nothing about the
    submitted credentials is echoed back.
    """
    if request.url.path == TOKEN_PATH:
        detail = INVALID_LOGIN_MODEL_MESSAGE
    else:
        detail = jsonable_encoder(exc.errors())
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


# Include users router
app.include_router(users_router)
