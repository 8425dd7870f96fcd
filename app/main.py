import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.errors import BackendError, InvalidUploadError, STATUS_FOR_KIND, user_message
from app.core.logs import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # Missing settings degrade features instead of stopping the server
    for name in settings.missing_settings():
        logger.warning("%s is not set; blog features backed by Appwrite will fail", name)
    if not settings.editor_configured:
        logger.warning("TINYMCE_API_KEY is missing or a placeholder; the editor will show a setup prompt")
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    lifespan=lifespan,
    description="Blog API backed by Appwrite accounts, databases and storage"
)


@app.exception_handler(BackendError)
async def backend_error_handler(request: Request, exc: BackendError):
    return JSONResponse(
        status_code=STATUS_FOR_KIND.get(exc.kind, 502),
        content={"detail": user_message(exc), "kind": exc.kind.value},
    )


@app.exception_handler(InvalidUploadError)
async def invalid_upload_handler(request: Request, exc: InvalidUploadError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.get("/")
def read_root():
    return {"message": "Welcome to the Quill Blog API. Visit /docs for Swagger UI."}


from app.routers import auth, posts, upload, pages

app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(posts.router, prefix="/api/v1/posts", tags=["posts"])
app.include_router(upload.router, prefix="/api/v1/upload", tags=["upload"])
app.include_router(pages.router, prefix="/api/v1/pages", tags=["pages"])

# Add CORS
from fastapi.middleware.cors import CORSMiddleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
