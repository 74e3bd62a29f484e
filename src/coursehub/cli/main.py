"""Coursehub CLI — run the server, manage the schema, poke the API.

Usage:
    coursehub serve                          # Run the API with uvicorn
    coursehub init-db                        # Create tables from the models (local SQLite)
    coursehub migrate                        # alembic upgrade head
    coursehub login ann@example.com          # Print a session token
    coursehub courses                        # List published courses
    coursehub enroll <course-id>             # Enroll with COURSEHUB_TOKEN
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from pathlib import Path
from typing import Optional

import click
import httpx

from coursehub import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"
MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "db" / "migrations"


def _api_url() -> str:
    return os.environ.get("COURSEHUB_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Coursehub API."""
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        # No running loop — normal CLI invocation
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _fail(message: str):
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


def _error_message(response: httpx.Response) -> str:
    """Pull the typed error out of an API error response."""
    try:
        detail = response.json().get("detail")
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(detail, dict):
        return f"{detail.get('message')} ({detail.get('code')})"
    return str(detail)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="coursehub")
def main():
    """Coursehub — course marketplace backend."""


# ---------------------------------------------------------------------------
# Server and schema
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: COURSEHUB_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: COURSEHUB_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from coursehub.config import settings

    uvicorn.run(
        "coursehub.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-db")
@click.option("--database-url", default=None, help="Override COURSEHUB_DATABASE_URL")
def init_db(database_url: Optional[str]):
    """Create all tables straight from the models (no migration history)."""
    from coursehub.config import settings

    url = database_url or settings.database_url
    _run(_init_db_impl(url))
    click.secho("Schema created.", fg="green")


async def _init_db_impl(url: str):
    from coursehub.db.engine import build_engine
    from coursehub.db.models import Base

    engine = build_engine(url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()


@main.command()
@click.option("--database-url", default=None, help="Override COURSEHUB_DATABASE_URL")
@click.option("--revision", default="head", show_default=True)
def migrate(database_url: Optional[str], revision: str):
    """Apply alembic migrations."""
    from alembic import command
    from alembic.config import Config

    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    if database_url:
        cfg.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(cfg, revision)
    click.secho(f"Migrated to {revision}.", fg="green")


# ---------------------------------------------------------------------------
# API commands
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.password_option("--password", confirmation_prompt=False)
def login(email: str, password: str):
    """Log in and print a session token (export it as COURSEHUB_TOKEN)."""
    _run(_login_impl(email, password))


async def _login_impl(email: str, password: str):
    async with _client() as c:
        r = await c.post("/api/v1/auth/login", json={"email": email, "password": password})
        if r.status_code != 200:
            _fail(_error_message(r))
        session = r.json()
        click.secho(f"Logged in as {session['name']} ({session['role']})", fg="green", err=True)
        click.echo(session["token"])


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def courses(as_json: bool):
    """List published courses."""
    _run(_courses_impl(as_json))


async def _courses_impl(as_json: bool):
    async with _client() as c:
        r = await c.get("/api/v1/courses")
        if r.status_code != 200:
            _fail(_error_message(r))
        items = r.json()

    if as_json:
        click.echo(json.dumps(items, indent=2, default=str))
        return
    if not items:
        click.echo("No courses found.")
        return

    rows = [
        {
            "id": c["id"][:8],
            "title": c["title"],
            "price": f"{c['price']:.2f}",
            "lessons": c["lesson_count"],
            "instructor": c["instructor"]["name"],
            "students": len(c["enrolled_student_ids"]),
        }
        for c in items
    ]
    _print_table(rows, [
        ("ID", "id", 8),
        ("TITLE", "title", 32),
        ("PRICE", "price", 8),
        ("LESSONS", "lessons", 7),
        ("INSTRUCTOR", "instructor", 20),
        ("STUDENTS", "students", 8),
    ])


@main.command()
@click.argument("course_id")
@click.option("--token", envvar="COURSEHUB_TOKEN", help="Session token (or COURSEHUB_TOKEN)")
def enroll(course_id: str, token: Optional[str]):
    """Enroll in a course."""
    if not token:
        _fail("--token required (or set COURSEHUB_TOKEN)")
    _run(_enroll_impl(course_id, token))


async def _enroll_impl(course_id: str, token: str):
    async with _client() as c:
        r = await c.post(
            f"/api/v1/courses/{course_id}/enroll",
            headers={"Authorization": f"Bearer {token}"},
        )
        if r.status_code != 200:
            _fail(_error_message(r))
        course = r.json()
        click.secho(f"Enrolled in {course['title']}", fg="green")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
