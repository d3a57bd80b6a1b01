"""CLI interface — thin wrapper over VideoShareService, the REST API and the MCP server."""

import logging

import typer

from vidshare.config import Settings
from vidshare.service import InvalidRequestError, VideoNotFoundError, VideoShareService, build_service


app = typer.Typer(
    name="vidshare",
    help="Video-sharing catalog: REST API, MCP server and admin commands.",
    no_args_is_help=True,
)


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _get_service() -> VideoShareService:
    """Create a service instance with default dependencies (no blob store)."""
    return build_service(Settings())


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Host to bind to."),
    port: int | None = typer.Option(None, "--port", help="Port to bind to."),
) -> None:
    """Start the REST API server."""
    import uvicorn

    from vidshare.api import create_app

    settings = Settings()
    _configure_logging(settings)
    host = host or settings.host
    port = port or settings.port
    typer.echo(f"Starting vidshare API on http://{host}:{port}/api")
    uvicorn.run(create_app(settings), host=host, port=port)


@app.command()
def mcp(
    stdio: bool = typer.Option(False, "--stdio", help="Use stdio transport instead of HTTP."),
    host: str | None = typer.Option(None, "--host", help="Host to bind to."),
    port: int = typer.Option(9093, "--port", help="Port to bind to."),
) -> None:
    """Start the vidshare MCP server."""
    from vidshare.server import mcp as mcp_server

    settings = Settings()
    if stdio:
        typer.echo("Starting vidshare MCP server (stdio)...", err=True)
        mcp_server.run(transport="stdio")
    else:
        host = host or settings.host
        typer.echo(f"Starting vidshare MCP server on http://{host}:{port}/mcp")
        mcp_server.run(transport="streamable-http", host=host, port=port)


@app.command(name="add-user")
def add_user(
    username: str = typer.Argument(..., help="Unique username."),
    avatar: str = typer.Option("", "--avatar", help="Avatar image URL."),
    bio: str = typer.Option("", "--bio", help="Short profile text."),
) -> None:
    """Create a user and print its API token."""
    svc = _get_service()
    user = svc.register_user(username, avatar=avatar, bio=bio)
    typer.echo(f"✅ Created user: {user.username}")
    typer.echo(f"   ID:    {user.user_id}")
    typer.echo(f"   Token: {user.api_token}")


@app.command(name="list")
def list_videos(
    search: str | None = typer.Option(None, "--search", "-s", help="Filter by title, description or tag."),
    page: int = typer.Option(1, "--page", "-p", help="Page number."),
    limit: int = typer.Option(12, "--limit", "-n", help="Videos per page."),
) -> None:
    """List public videos in the catalog, newest first."""
    svc = _get_service()
    try:
        result = svc.list_videos(page=page, limit=limit, search=search)
    except InvalidRequestError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    if not result.videos:
        typer.echo("No videos found.")
        return
    for v in result.videos:
        owner = v.uploader.username if v.uploader else "?"
        tags = f" [{', '.join(v.tags)}]" if v.tags else ""
        typer.echo(f"  {v.video_id}  {v.views:>6d} views  {owner:<16s}  {v.title}{tags}")
    typer.echo(f"Page {result.current_page} of {result.total_pages}")


@app.command()
def info(video_id: str = typer.Argument(..., help="Video ID.")) -> None:
    """Show full details for a video without counting a view."""
    svc = _get_service()
    try:
        video = svc.get_video(video_id, count_view=False)
    except VideoNotFoundError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Title:       {video.title}")
    typer.echo(f"Uploader:    {video.uploader.username if video.uploader else '(unknown)'}")
    typer.echo(f"URL:         {video.video_url}")
    typer.echo(f"Thumbnail:   {video.thumbnail_url}")
    typer.echo(f"Storage ID:  {video.storage_id}")
    typer.echo(f"Playback:    {video.playback.mode if video.playback else '?'}")
    typer.echo(f"Views:       {video.views}")
    typer.echo(f"Likes:       {video.likes_count}")
    typer.echo(f"Tags:        {', '.join(video.tags) or '(none)'}")
    typer.echo(f"Private:     {'yes' if video.is_private else 'no'}")
    typer.echo(f"Created:     {video.created_at}")


@app.command()
def classify(url: str = typer.Argument(..., help="Video URL to classify.")) -> None:
    """Show provider, identifier and thumbnail derived from a video URL."""
    result = _get_service().classify(url)
    typer.echo(f"Provider:    {result.kind.value}")
    typer.echo(f"Provider ID: {result.provider_id or '(none)'}")
    typer.echo(f"Storage ID:  {result.storage_id or '(synthesized on upload)'}")
    typer.echo(f"Thumbnail:   {result.thumbnail_url}")
