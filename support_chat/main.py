"""FastAPI application entry point for the customer support chat API."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from support_chat.api.routes.chat import GENERIC_ERROR_REPLY
from support_chat.api.routes.chat import router as chat_router
from support_chat.config import settings
from support_chat.database import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="[%(asctime)s] %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup."""
    init_db()
    logger.info("Database initialized")
    yield


app = FastAPI(
    title="Support Chat API",
    description="Customer support chat backed by an LLM completion endpoint",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", response_class=HTMLResponse)
def root():
    return """
    <html>
        <head>
            <title>Support Chat API</title>
        </head>
        <body>
            <h1>Support Chat API is running</h1>
            <a href="/docs">Open API Docs</a>
        </body>
    </html>
    """


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


app.include_router(chat_router)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """
    Handle unhandled exceptions with the same reply the chat endpoint uses.

    Covers store failures on the history and delete routes.
    """
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"reply": GENERIC_ERROR_REPLY},
    )
