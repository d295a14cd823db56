"""
Entry point for the Marketplace Pricing Console.

``bootstrap`` builds the object graph (config, connections, local store,
services, current session) and ``main`` hands it to the CustomTkinter
shell.  Nothing is wired at import time.

    python main.py
"""

from __future__ import annotations

import atexit
import sys
import tkinter
import traceback
from tkinter import messagebox

from marketplace_console.config import AppConfig, get_config
from marketplace_console.database import DatabaseManager
from marketplace_console.logger import StructuredLogger, get_logger
from marketplace_console.models.storage_models import SeekingOrgSession
from marketplace_console.services import ServiceContainer, create_services
from marketplace_console.storage import LocalStore, register_default_schemas
from marketplace_console.ui.app_shell import AppShell

_LOCAL_USER_ID = "local-admin"


def _restore_or_start_session(services: ServiceContainer, config: AppConfig) -> SeekingOrgSession:
    session_state = services["session_state_service"]
    session = session_state.get_current_session()
    if session is not None:
        return session
    session = SeekingOrgSession(
        user_id=_LOCAL_USER_ID,
        country=config.DEFAULT_COUNTRY,
        organization_type=config.DEFAULT_ORGANIZATION_TYPE or None,
    )
    session_state.start_session(session)
    return session


def bootstrap() -> tuple[DatabaseManager, ServiceContainer, SeekingOrgSession]:
    """Open connections and build every service; nothing is shown yet."""
    config = get_config()
    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        sqlite_path=config.LOCAL_STORE_PATH,
        logger=StructuredLogger(name="database"),
    )
    atexit.register(db.close)

    local_store = LocalStore(db=db, logger=StructuredLogger(name="local_store"))
    register_default_schemas(local_store)

    services = create_services(db=db, local_store=local_store, config=config)
    return db, services, _restore_or_start_session(services, config)


def main() -> None:
    logger = get_logger("main")
    db, services, session = bootstrap()
    logger.info(
        "Console ready",
        extra={"online": db.is_online, "user_id": session.user_id, "country": session.country},
    )
    try:
        AppShell(db=db, services=services, session=session, logger=get_logger("ui")).mainloop()
    finally:
        db.close()
        logger.info("Console closed")


def _report_fatal(exc: BaseException) -> None:
    """Show *exc* in a plain Tk dialog, or on stderr when Tk is unusable."""
    detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    summary = f"{type(exc).__name__}: {exc}"
    try:
        root = tkinter.Tk()
        root.withdraw()
        messagebox.showerror(
            title="Marketplace Pricing Console",
            message=f"The console stopped because of an unexpected error.\n\n{summary}",
            detail=detail,
        )
        root.destroy()
    except tkinter.TclError:
        sys.stderr.write(f"FATAL: {summary}\n{detail}")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        _report_fatal(exc)
        sys.exit(1)
