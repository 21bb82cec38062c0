# teamtasks/main.py

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import os
import logging

# Роутеры
from teamtasks.api.auth import router as auth_router
from teamtasks.api.notification import router as notification_router
from teamtasks.api.realtime import router as realtime_router
from teamtasks.api.task import router as task_router
from teamtasks.api.team import router as team_router
from teamtasks.api.user import router as user_router

from teamtasks.core.settings import settings
from teamtasks.core.exceptions import BaseAppException
from teamtasks.database import engine
from teamtasks.models.base import Base
from teamtasks.realtime.hub import ConnectionHub
import teamtasks.models  # регистрирует все таблицы в Base.metadata

# Логирование
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting TeamTasks API")
    Base.metadata.create_all(bind=engine)
    app.state.event_hub = ConnectionHub()
    yield
    logger.info("Stopping TeamTasks API")


app = FastAPI(
    title="TeamTasks API",
    version="1.0.0",
    description="Tasks, teams and notifications with real-time updates",
    lifespan=lifespan,
)

# Middlewares
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(user_router)
app.include_router(task_router)
app.include_router(team_router)
app.include_router(notification_router)
app.include_router(realtime_router)

# Health check & root
@app.get("/", tags=["Health"])
def root():
    return {"status": "TeamTasks API is running!"}

@app.get("/health", tags=["Health"])
def health():
    return {"ok": True}

# Все ошибки отдаются в едином конверте {success: false, message}

@app.exception_handler(BaseAppException)
async def app_exception_handler(request: Request, exc: BaseAppException):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{field}: {error.get('msg')}" if field else error.get("msg", "Invalid input"))
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "; ".join(messages)},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "teamtasks.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=settings.DEBUG,
    )
