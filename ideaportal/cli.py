"""Idea Portal CLI tool (portalctl)."""

import typer

app = typer.Typer(name="portalctl", help="Idea Portal CLI")
db_app = typer.Typer(help="Database management commands")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init():
    """Create all tables and the default badge and campaigns."""
    from ideaportal.db.session import SessionLocal, create_tables
    from ideaportal.db.seeds.seed_defaults import seed_defaults

    create_tables()
    db = SessionLocal()
    try:
        seed_defaults(db)
    finally:
        db.close()
    typer.echo("Tables created and defaults seeded")


@db_app.command("seed")
def db_seed():
    """Seed demo users, ideas, votes and comments."""
    from ideaportal.db.session import SessionLocal
    from ideaportal.db.seeds.seed_sample_data import seed_sample_data

    db = SessionLocal()
    try:
        result = seed_sample_data(db)
    finally:
        db.close()
    typer.echo(result["message"])


@db_app.command("prune-sessions")
def db_prune_sessions():
    """Delete revoked and expired login sessions."""
    from ideaportal.db.session import SessionLocal
    from ideaportal.services.session_service import session_service

    db = SessionLocal()
    try:
        removed = session_service.prune(db)
    finally:
        db.close()
    typer.echo(f"Removed {removed} sessions")


@app.command("mail")
def show_mail(
    user_id: int = typer.Argument(..., help="User ID"),
    kind: str = typer.Option("verification", help="verification or reset"),
):
    """Print the last link written to the mail outbox for a user."""
    from ideaportal.services.mail_service import mail_service

    if kind not in ("verification", "reset"):
        raise typer.BadParameter("kind must be 'verification' or 'reset'")
    link = mail_service.read(kind, user_id)
    if link is None:
        typer.echo(f"No {kind} mail for user {user_id}")
        raise typer.Exit(code=1)
    typer.echo(link)


@app.command("audit")
def show_audit(
    action: str = typer.Option(None, help="Filter by action substring"),
    actor_id: int = typer.Option(None, help="Filter by actor"),
    limit: int = typer.Option(20, help="Number of entries"),
):
    """List recent audit log entries."""
    from ideaportal.db.session import SessionLocal
    from ideaportal.services.audit_service import audit_service

    db = SessionLocal()
    try:
        for entry in audit_service.recent(db, action=action, actor_id=actor_id, limit=limit):
            typer.echo(
                f"  [{entry.created_at}] {entry.action} "
                f"{entry.resource_type}:{entry.resource_id or '-'} by {entry.actor_email or entry.actor_id or '-'} "
                f"rid={entry.request_id or '-'}"
            )
    finally:
        db.close()


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Host"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(False, help="Auto-reload"),
):
    """Start the FastAPI server."""
    import uvicorn
    uvicorn.run("ideaportal.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
