"""
Job card number generation.

Numbers look like ``JC-20250124-0001``: a static prefix, the creation date and
a 4-digit sequence that restarts at 0001 for every garage on every calendar
day.

The generator reads the highest number issued so far and proposes the next
one. That read-then-propose step is optimistic: two concurrent requests can
propose the same candidate. The unique constraint on
``(garage_id, job_card_number)`` is what actually guarantees uniqueness, and
``garageops.services.job_cards.create_job_card`` retries the insert when it
loses that race.
"""
import logging
import re
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from garageops.exceptions import JobCardNumberExhaustedError, PersistenceError
from garageops.models import JobCard

logger = logging.getLogger(__name__)

PREFIX = "JC"
MAX_ATTEMPTS = 5
SEQUENCE_WIDTH = 4
MAX_SEQUENCE = 10 ** SEQUENCE_WIDTH - 1

JOB_CARD_NUMBER_PATTERN = re.compile(r"^JC-\d{8}-\d{4}$")


def format_date(day: date) -> str:
    """Render a date as YYYYMMDD."""
    return f"{day.year:04d}{day.month:02d}{day.day:02d}"


def format_job_card_number(day: date, sequence: int) -> str:
    """Build a job card number; the sequence must fit in four digits."""
    if not 1 <= sequence <= MAX_SEQUENCE:
        raise ValueError(f"sequence {sequence} is outside 1..{MAX_SEQUENCE}")
    return f"{PREFIX}-{format_date(day)}-{sequence:0{SEQUENCE_WIDTH}d}"


def is_valid_job_card_number(job_card_number) -> bool:
    """
    Check the ``JC-YYYYMMDD-NNNN`` format.

    >>> is_valid_job_card_number("JC-20250124-0001")
    True
    >>> is_valid_job_card_number("JC-20250124-1")
    False
    """
    if not isinstance(job_card_number, str):
        return False
    return JOB_CARD_NUMBER_PATTERN.fullmatch(job_card_number) is not None


def extract_date_from_job_card_number(job_card_number) -> Optional[date]:
    """
    Return the creation date encoded in a job card number.

    Invalid numbers, including well-formed ones naming an impossible date
    such as ``JC-20251399-0001``, give None rather than raising.
    """
    if not is_valid_job_card_number(job_card_number):
        return None

    date_str = job_card_number.split("-")[1]
    try:
        return date(int(date_str[:4]), int(date_str[4:6]), int(date_str[6:8]))
    except ValueError:
        return None


def parse_sequence(job_card_number: str) -> Optional[int]:
    """Sequence part of a job card number, or None if it is not numeric."""
    try:
        return int(job_card_number.rsplit("-", 1)[1])
    except (IndexError, ValueError):
        return None


async def propose_job_card_number(db: AsyncSession, garage_id: str, day: date) -> str:
    """Next candidate after the highest number issued for the garage on ``day``."""
    date_prefix = f"{PREFIX}-{format_date(day)}-"

    # Lexicographic order is numeric order because the sequence is zero-padded
    result = await db.execute(
        select(JobCard.job_card_number)
        .where(
            JobCard.garage_id == garage_id,
            JobCard.job_card_number.like(f"{date_prefix}%"),
        )
        .order_by(JobCard.job_card_number.desc())
        .limit(1)
    )
    last_number = result.scalar_one_or_none()

    next_sequence = 1
    if last_number is not None:
        last_sequence = parse_sequence(last_number)
        if last_sequence is not None:
            next_sequence = last_sequence + 1

    if next_sequence > MAX_SEQUENCE:
        raise JobCardNumberExhaustedError(
            "Failed to generate unique job card number",
            details=f"All {MAX_SEQUENCE} sequence numbers for {format_date(day)} are in use",
        )

    return format_job_card_number(day, next_sequence)


async def job_card_number_exists(db: AsyncSession, garage_id: str, job_card_number: str) -> bool:
    """True when the garage already has a job card (deleted or not) with this number."""
    result = await db.execute(
        select(JobCard.id)
        .where(JobCard.garage_id == garage_id, JobCard.job_card_number == job_card_number)
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def generate_job_card_number(db: AsyncSession, garage_id: str, today: Optional[date] = None) -> str:
    """
    Generate the next job card number for a garage.

    Each attempt proposes a candidate and re-checks that it is still free.
    Collisions and database errors are retried up to ``MAX_ATTEMPTS`` times.
    A database error rolls the session back, so call this before adding
    anything else to the unit of work.

    Raises:
        JobCardNumberExhaustedError: every attempt collided, or the day's
            sequence space is used up.
        PersistenceError: the last attempt failed in the database; the
            driver message is kept in ``details``.
    """
    day = today or date.today()
    last_error: Optional[Exception] = None

    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            candidate = await propose_job_card_number(db, garage_id, day)

            if await job_card_number_exists(db, garage_id, candidate):
                logger.warning(
                    "Job card number %s already exists, retrying (attempt %d/%d)",
                    candidate, attempt, MAX_ATTEMPTS,
                )
                last_error = JobCardNumberExhaustedError(f"Job card number collision: {candidate}")
                continue

            logger.info("Generated job card number %s (attempt %d/%d)", candidate, attempt, MAX_ATTEMPTS)
            return candidate

        except SQLAlchemyError as exc:
            logger.error(
                "Error generating job card number (attempt %d/%d): %s", attempt, MAX_ATTEMPTS, exc
            )
            last_error = exc
            # A failed statement poisons the transaction on PostgreSQL
            await db.rollback()

    message = f"Failed to generate unique job card number after {MAX_ATTEMPTS} attempts"
    if isinstance(last_error, SQLAlchemyError):
        raise PersistenceError(message, details=str(getattr(last_error, "orig", None) or last_error)) from last_error
    raise JobCardNumberExhaustedError(message, details=str(last_error) if last_error else None)
