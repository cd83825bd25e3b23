"""User management CLI commands.

``user create --admin`` bootstraps the first administrator; after that,
admins approve pastors and IT members through the API or ``user approve``.
"""

import asyncio

import typer

user_app = typer.Typer()


@user_app.command("create")
def create_user(
    email: str = typer.Option(..., prompt=True, help="Email address"),
    first_name: str = typer.Option(..., "--first-name", prompt=True, help="First name"),
    last_name: str = typer.Option(..., "--last-name", prompt=True, help="Last name"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password"),
    role: str = typer.Option("standard", help="Role (standard/pastor/IT)"),
    church: str | None = typer.Option(None, "--church", help="Church selection (required for pastor/IT)"),
    admin: bool = typer.Option(False, "--admin", help="Create the user as an administrator"),
) -> None:
    """Create a new user."""
    asyncio.run(_create_user(email, first_name, last_name, password, role, church, admin=admin))


async def _create_user(
    email: str,
    first_name: str,
    last_name: str,
    password: str,
    role: str,
    church: str | None,
    *,
    admin: bool = False,
) -> None:
    from saintshub_api.core.config import load_settings
    from saintshub_api.core.database import dispose_engine, init_engine, session_scope
    from saintshub_api.core.errors import AppError
    from saintshub_api.core.validation import validate_payload
    from saintshub_api.schemas.auth import SignupRequest, require_church_selection
    from saintshub_api.services.auth_service import create_user

    settings = load_settings()
    init_engine(settings.database_url)

    try:
        request = validate_payload(
            SignupRequest,
            {
                "email": email,
                "firstName": first_name,
                "lastName": last_name,
                "password": password,
                "role": role,
                "churchSelection": church,
            },
            rules=[require_church_selection],
        )
        async with session_scope() as session:
            user = await create_user(session, request, is_admin=admin)
            typer.echo(f"User '{user.email}' created with role '{user.role}' (admin: {user.is_admin})")
    except AppError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()


@user_app.command("approve")
def approve_user(email: str = typer.Argument(..., help="Email of the user to approve")) -> None:
    """Grant administrator access to a user."""
    asyncio.run(_approve_user(email))


async def _approve_user(email: str) -> None:
    from saintshub_api.core.config import load_settings
    from saintshub_api.core.database import dispose_engine, init_engine, session_scope
    from saintshub_api.services.auth_service import approve_user, get_user_by_email

    settings = load_settings()
    init_engine(settings.database_url)

    try:
        async with session_scope() as session:
            user = await get_user_by_email(session, email)
            if user is None:
                typer.echo(f"Error: no user with email '{email}'", err=True)
                raise typer.Exit(code=1)
            await approve_user(session, user.id)
            typer.echo(f"User '{user.email}' approved as admin")
    finally:
        await dispose_engine()


@user_app.command("list")
def list_users(
    pending: bool = typer.Option(False, "--pending", help="Only users awaiting approval"),
) -> None:
    """List users."""
    asyncio.run(_list_users(pending=pending))


async def _list_users(*, pending: bool = False) -> None:
    from saintshub_api.core.config import load_settings
    from saintshub_api.core.database import dispose_engine, init_engine, session_scope
    from saintshub_api.services.auth_service import list_pending_users, list_users

    settings = load_settings()
    init_engine(settings.database_url)

    try:
        async with session_scope() as session:
            users = await (list_pending_users(session) if pending else list_users(session))
            typer.echo(f"{'Email':<35} {'Name':<30} {'Role':<10} {'Admin':<6}")
            typer.echo("-" * 84)
            for user in users:
                typer.echo(f"{user.email:<35} {user.full_name:<30} {user.role:<10} {user.is_admin!s:<6}")
            typer.echo(f"\nTotal: {len(users)}")
    finally:
        await dispose_engine()
