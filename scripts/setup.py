#!/usr/bin/env python3
"""Setup script for the studio booking API: migrate and seed a week of classes."""

import asyncio
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

import jwt
from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from studio.core.config import settings
from studio.core.database import async_session_factory, close_db
from studio.domain.calendar import week_start
from studio.models import ClassDefinition
from studio.schemas.scheduled_class import (
    CreateClassDefinitionCommand,
    CreateInstructorCommand,
    CreateScheduledClassCommand,
)
from studio.services.scheduled_class_service import ScheduledClassService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_CLASSES = [
    ("Yoga", "#10B981", 60, 12),
    ("Pilates", "#6366F1", 55, 10),
    ("Crossfit", "#EF4444", 45, 15),
    ("Spinning", "#F59E0B", 50, None),
]


def setup_database() -> None:
    """Run Alembic migrations up to head."""
    logger.info("Running database migrations...")
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data() -> None:
    """Create class definitions, an instructor and this week's schedule."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        existing = await db.scalar(select(func.count(ClassDefinition.id)))
        if existing:
            logger.info("Sample data already exists, skipping...")
            return

        service = ScheduledClassService(db)
        instructor = await service.create_instructor(
            CreateInstructorCommand(full_name="Anna Kowalska", email="anna@example.com")
        )

        monday = week_start(datetime.now(timezone.utc))
        for index, (name, color, minutes, capacity) in enumerate(SAMPLE_CLASSES):
            definition = await service.create_class_definition(
                CreateClassDefinitionCommand(name=name, color=color, duration_minutes=minutes)
            )
            for day in range(index % 2, 7, 2):
                start = monday + timedelta(days=day, hours=7 + index * 3)
                await service.create_scheduled_class(
                    CreateScheduledClassCommand(
                        class_id=definition.id,
                        instructor_id=instructor.id,
                        start_time=start,
                        end_time=start + timedelta(minutes=minutes),
                        capacity=capacity,
                    )
                )

    await close_db()
    logger.info("Sample data created successfully!")


def development_token(user_id: str, roles: list[str]) -> str:
    """Sign a bearer token with the configured secret (development only)."""
    payload = {
        "sub": user_id,
        "roles": roles,
        "exp": int((datetime.now(timezone.utc) + timedelta(days=7)).timestamp()),
    }
    return jwt.encode(payload, settings.bearer_token_secret, algorithm="HS256")


def main() -> None:
    """Main setup function."""
    logger.info("Starting studio booking API setup...")

    setup_database()
    asyncio.run(create_sample_data())

    if not settings.is_production:
        logger.info(f"Member token: {development_token('member-1', [])}")
        logger.info(f"Admin token: {development_token('admin-1', ['admin'])}")

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn studio.main:app --reload")


if __name__ == "__main__":
    main()
