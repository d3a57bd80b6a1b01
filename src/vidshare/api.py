"""REST API — thin FastAPI wrapper exposing VideoShareService over HTTP."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, File, Form, Header, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vidshare.config import Settings
from vidshare.models import ApiModel, LikeResult, User, VideoListing, VideoPage
from vidshare.service import (
    InvalidRequestError,
    NotVideoOwnerError,
    VideoNotFoundError,
    VideoShareService,
    build_service,
)
from vidshare.storage.blobstore import (
    BlobStoreError,
    CloudinaryBlobStore,
    UploadRejectedError,
    check_upload,
)

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when a request lacks a valid bearer token."""


class LinkUpload(ApiModel):
    """JSON body of ``POST /videos/upload-link``."""

    title: str | None = None
    description: str | None = ""
    tags: str | None = ""
    video_url: str | None = None


def get_service(request: Request) -> VideoShareService:
    return request.app.state.service


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def current_user(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> User:
    """Resolve the caller from an ``Authorization: Bearer <token>`` header."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Authentication required")
    user = get_service(request).authenticate(token.strip())
    if user is None:
        raise AuthenticationError("Invalid or expired token")
    return user


Service = Annotated[VideoShareService, Depends(get_service)]
CurrentUser = Annotated[User, Depends(current_user)]

router = APIRouter(prefix="/api")


@router.get("/health")
def health() -> dict:
    return {"message": "Server is running!"}


@router.post("/videos/upload", status_code=201, response_model=VideoListing)
def upload_video(
    svc: Service,
    user: CurrentUser,
    settings: Annotated[Settings, Depends(get_settings)],
    video: Annotated[UploadFile | None, File()] = None,
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = "",
    tags: Annotated[str | None, Form()] = "",
):
    """Upload a video file to the blob store and record it in the catalog."""
    if video is None or not video.filename:
        raise InvalidRequestError("No video file provided")
    if svc.blob_store is None:
        raise BlobStoreError("No blob store configured")

    check_upload(video.filename, video.size, settings.max_upload_bytes)
    # Validate metadata before spending a transfer on the blob store
    svc.validate_draft(title, description, tags)
    stored = svc.blob_store.upload(video.file, video.filename)
    return svc.add_uploaded_video(user, stored, title, description, tags)


@router.post("/videos/upload-link", status_code=201, response_model=VideoListing)
def upload_link(svc: Service, user: CurrentUser, body: LinkUpload):
    """Add a video hosted elsewhere (Drive, YouTube, Vimeo, direct link)."""
    return svc.add_linked_video(user, body.video_url, body.title, body.description, body.tags)


@router.get("/videos", response_model=VideoPage)
def list_videos(
    svc: Service,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1)] = None,
    search: str | None = None,
):
    """Public catalog, newest first, with optional search."""
    return svc.list_videos(page=page, limit=limit, search=search)


@router.get("/videos/user/my-videos", response_model=list[VideoListing])
def my_videos(svc: Service, user: CurrentUser):
    """The caller's own videos."""
    return svc.my_videos(user)


@router.get("/videos/{video_id}", response_model=VideoListing)
def get_video(svc: Service, video_id: str):
    """A single video. Every fetch counts as a view."""
    return svc.get_video(video_id)


@router.delete("/videos/{video_id}")
def delete_video(svc: Service, user: CurrentUser, video_id: str) -> dict:
    svc.delete_video(video_id, user)
    return {"message": "Video deleted successfully"}


@router.post("/videos/{video_id}/like", response_model=LikeResult)
def like_video(svc: Service, user: CurrentUser, video_id: str):
    return svc.toggle_like(video_id, user)


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _register_error_handlers(app: FastAPI) -> None:
    """Convert every failure into a ``{"message": ...}`` body."""

    @app.exception_handler(InvalidRequestError)
    async def _invalid(request: Request, exc: InvalidRequestError):
        return _message(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):
        err = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query"))
        return _message(400, f"Invalid {field or 'request'}: {err.get('msg', 'bad input')}")

    @app.exception_handler(UploadRejectedError)
    async def _rejected(request: Request, exc: UploadRejectedError):
        return _message(413 if exc.too_large else 400, str(exc))

    @app.exception_handler(AuthenticationError)
    async def _unauthenticated(request: Request, exc: AuthenticationError):
        return _message(401, str(exc))

    @app.exception_handler(NotVideoOwnerError)
    async def _forbidden(request: Request, exc: NotVideoOwnerError):
        return _message(403, str(exc))

    @app.exception_handler(VideoNotFoundError)
    async def _not_found(request: Request, exc: VideoNotFoundError):
        return _message(404, "Video not found")

    @app.exception_handler(BlobStoreError)
    async def _blob_store(request: Request, exc: BlobStoreError):
        logger.error("Blob store failure on %s %s: %s", request.method, request.url.path, exc)
        return _message(500, "Error uploading video")

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _message(500, "Internal server error")


def create_app(
    settings: Settings | None = None,
    service: VideoShareService | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Process configuration. Defaults to a fresh Settings().
        service: Pre-wired service, mainly for tests. Defaults to SQLite
                 repositories under settings.data_dir and Cloudinary.
    """
    settings = settings or Settings()
    app = FastAPI(title="vidshare", description="Video-sharing REST API")
    app.state.settings = settings
    app.state.service = service or build_service(settings, CloudinaryBlobStore(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.allowed_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)
    app.include_router(router)
    return app
