#!/usr/bin/env python3
"""
Seed a database with demo accounts and tasks.

Usage: python -m taskflow.db.seed
"""

import asyncio

from loguru import logger

from taskflow.db.utils import create_engine, create_session_factory, create_tables
from taskflow.log import configure_logging
from taskflow.tasks import services
from taskflow.tasks.enums import Priority, TaskStatus, UserRole
from taskflow.tasks.models import Task, User

DEMO_USERS = [
    ("Manager User", "manager@fealtyx.com", "manager123", UserRole.MANAGER),
    ("Developer One", "dev1@fealtyx.com", "dev123", UserRole.DEVELOPER),
    ("Developer Two", "dev2@fealtyx.com", "dev123", UserRole.DEVELOPER),
]


async def _ensure_user(session, name: str, email: str, password: str, role: UserRole) -> User:
    user = await services.get_user_by_email(session, email)
    if user is None:
        user = await services.create_user(
            session, name=name, email=email, password=password, role=role,
        )
    return user


async def seed(session) -> None:
    manager, dev1, dev2 = [
        await _ensure_user(session, *row) for row in DEMO_USERS
    ]
    # sample tasks are inserted as-is; their statuses skip the workflow on purpose
    session.add_all(
        [
            Task(
                title="Fix login page layout",
                description="The login page layout is broken on mobile devices",
                priority=Priority.HIGH,
                status=TaskStatus.OPEN,
                assignee_id=dev1.id,
                creator_id=manager.id,
            ),
            Task(
                title="Implement dark mode",
                description="Add dark mode support to the application",
                priority=Priority.MEDIUM,
                status=TaskStatus.IN_PROGRESS,
                assignee_id=dev2.id,
                creator_id=manager.id,
            ),
            Task(
                title="Add user profile page",
                description="Create a new page for users to view and edit their profile",
                priority=Priority.LOW,
                status=TaskStatus.PENDING_APPROVAL,
                assignee_id=dev1.id,
                creator_id=manager.id,
            ),
        ]
    )
    await session.flush()


async def main() -> None:
    configure_logging()
    engine = create_engine()
    try:
        await create_tables(engine)
        async with create_session_factory(engine)() as session:
            await seed(session)
            await session.commit()
        logger.info("Seeded {} demo users and sample tasks", len(DEMO_USERS))
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
