#!/usr/bin/env python3
"""Seed demo users (and one task) into the database.

Usage:
    cd backend
    python -m scripts.seed_users

Existing users are left untouched; each run adds one demo task. All demo
accounts share the password ``password123``.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import date, timedelta
from pathlib import Path

BACKEND_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BACKEND_DIR))

# Ensure CWD is backend/ so sqlite:///data/taskmanager.db resolves correctly
os.chdir(BACKEND_DIR)

from sqlmodel import Session, select  # noqa: E402

from taskmanager.core.accounts import normalize_email, register_user  # noqa: E402
from taskmanager.core.task_service import create_task  # noqa: E402
from taskmanager.db.database import create_db_and_tables, engine  # noqa: E402
from taskmanager.models.task import TaskDraft  # noqa: E402
from taskmanager.models.user import Identity, User  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("seed_users")

DEMO_PASSWORD = "password123"
USERS: list[dict] = [
    {"name": "Alice Admin", "email": "alice@example.com"},
    {"name": "Bob Builder", "email": "bob@example.com"},
    {"name": "Carol Support", "email": "carol@example.com"},
]


def main() -> None:
    create_db_and_tables()
    identities: dict[str, Identity] = {}
    with Session(engine) as session:
        for entry in USERS:
            existing = session.exec(select(User).where(User.email == normalize_email(entry["email"]))).first()
            if existing is not None:
                identities[entry["email"]] = Identity.from_user(existing)
                logger.info("User exists, skipping: %s", entry["email"])
                continue
            identities[entry["email"]] = register_user(session, password=DEMO_PASSWORD, **entry)

        alice = identities["alice@example.com"]
        bob = identities["bob@example.com"]
        task = create_task(session, alice, TaskDraft(
            title="Replace printer toner on 3rd floor",
            description="Ticket from @carol, see #hardware queue",
            priority="Medium",
            due_date=date.today() + timedelta(days=3),
            assignee_id=bob.id,
        ))
        logger.info("Seeded task #%d assigned to %s", task.id, task.assignee_name)


if __name__ == "__main__":
    main()
