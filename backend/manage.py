import asyncio
import logging
import sys

import typer
import uvicorn
from pydantic import ValidationError

import blog.db_models  # noqa: F401

from blog.config import settings
from blog.database import async_session_factory, create_all
from blog.exceptions import AppError
from blog.categories.schemas import CategoryCreate
from blog.categories import service as category_service
from blog.users.models import Role, User as UserModel
from blog.users.schema import UserCreate
from blog.users.service import create_user
from blog.utils.validation import validate_password

logger = logging.getLogger("blog.manage")

cli = typer.Typer()


def install_fatal_exception_hook() -> None:
    """처리되지 않은 예외는 기록 후 프로세스를 종료합니다 (복구하지 않음)."""
    def _hook(exc_type, exc, tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, tb)
            return
        logger.critical("Uncaught exception, shutting down", exc_info=(exc_type, exc, tb))
        sys.exit(1)

    sys.excepthook = _hook


async def create_admin_runner(username: str, email: str, password: str) -> UserModel:
    async with async_session_factory() as session:
        user_data = UserCreate(username=username, email=email, password=password)
        return await create_user(user_data=user_data, db=session, role=Role.ADMIN)


@cli.command(name="init-db")
def init_db():
    """Creates all tables that do not exist yet."""
    asyncio.run(create_all())
    print("✅ Tables created")


@cli.command(name="create-admin")
def createadmin(
    username: str = typer.Option(..., "--username", "-u", help="Admin's username."),
    email: str = typer.Option(..., "--email", "-e", help="Admin's email address."),
    password: str = typer.Option(..., "--password", "-p", help="Admin's secure password."),
):
    """
    Creates a new user with 'admin' privileges in the database.
    """
    check = validate_password(password)
    if not check.is_valid:
        for error in check.errors:
            print(f"❌ {error}")
        raise typer.Exit(code=1)

    try:
        admin_user = asyncio.run(create_admin_runner(username, email, password))
    except AppError as e:
        print(f"❌ Error creating admin user: {e.message}")
        raise typer.Exit(code=1)

    print("✅ Admin user created successfully!")
    print(f"   ID: {admin_user.id}")
    print(f"   Email: {admin_user.email}")
    print(f"   Role: {admin_user.role.value}")


@cli.command(name="create-category")
def createcategory(
    name: str = typer.Option(..., "--name", "-n", help="Category name."),
    description: str = typer.Option(None, "--description", "-d", help="Optional description."),
    color: str = typer.Option("#000000", "--color", "-c", help="Hex color, e.g. #ff8800."),
):
    """Creates a post category."""
    async def runner():
        async with async_session_factory() as session:
            data = CategoryCreate(name=name, description=description, color=color)
            return await category_service.create_category(session, data)

    try:
        category = asyncio.run(runner())
    except AppError as e:
        print(f"❌ {e.message}")
        raise typer.Exit(code=1)
    except ValidationError as e:
        print(f"❌ Invalid category: {e}")
        raise typer.Exit(code=1)

    print(f"✅ Category created: {category.name} (id={category.id}, slug={category.slug})")


@cli.command()
def runserver(
    host: str = typer.Option(settings.APP_HOST, "--host"),
    port: int = typer.Option(settings.APP_PORT, "--port"),
    reload: bool = typer.Option(False, "--reload"),
):
    """Runs the API server with uvicorn."""
    install_fatal_exception_hook()
    uvicorn.run("blog.main:app", host=host, port=port, reload=reload, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    cli()
