"""HR Records CLI tool (hrctl)."""

import typer

app = typer.Typer(name="hrctl", help="HR Records CLI")
db_app = typer.Typer(help="Database management commands")
app.add_typer(db_app, name="db")


@db_app.command("create")
def db_create():
    """Create the MySQL database if it doesn't exist."""
    import pymysql
    from sqlalchemy.engine import make_url
    from hr_backend.core.config import get_settings

    url = make_url(get_settings().DATABASE_URL)
    if not url.drivername.startswith("mysql"):
        typer.echo(f"Nothing to create for '{url.drivername}'")
        raise typer.Exit()

    conn = pymysql.connect(
        host=url.host, port=url.port or 3306, user=url.username, password=url.password or "",
    )
    try:
        cursor = conn.cursor()
        cursor.execute(
            f"CREATE DATABASE IF NOT EXISTS `{url.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
        typer.echo(f"Database '{url.database}' created (or already exists)")
    finally:
        conn.close()


@db_app.command("init")
def db_init():
    """Create all tables."""
    from hr_backend.core.config import get_settings
    from hr_backend.db.base import Base
    from hr_backend.db.session import create_db_engine
    import hr_backend.models  # noqa: F401

    engine = create_db_engine(get_settings())
    Base.metadata.create_all(bind=engine)
    engine.dispose()
    typer.echo("Tables created")


@db_app.command("seed")
def db_seed():
    """Seed the default administrator and upload settings."""
    from hr_backend.core.config import get_settings
    from hr_backend.db.session import create_db_engine, create_session_factory
    from hr_backend.db.seeds.seed_admin import seed_default_admin
    from hr_backend.db.seeds.seed_settings import seed_default_settings

    settings = get_settings()
    engine = create_db_engine(settings)
    db = create_session_factory(engine)()
    try:
        created = seed_default_admin(db, settings)
        seed_default_settings(db, settings)
    finally:
        db.close()
        engine.dispose()
    if created:
        typer.echo(f"Default admin '{settings.DEFAULT_ADMIN_LOGIN}' created")
    typer.echo("All seeds applied")


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Host"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(False, help="Auto-reload"),
):
    """Start the API server."""
    import uvicorn
    uvicorn.run("hr_backend.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
