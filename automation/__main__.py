"""
Run a single booking from the command line.

Usage:
    python -m automation --date 03/02/2026 --service "Curly Cut" \
        --first-name John --last-name Doe --email john@example.com --phone 5551234567
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .config import load_booking_settings
from .errors import ValidationError
from .logging_context import configure_logging, set_booking_id
from .models import DEFAULT_EMPLOYEE, CustomerInfo, TimePreference
from .tasks import book_appointment

logger = logging.getLogger("automation")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="salon-book",
        description="Fill and submit the salon booking form once.",
    )
    parser.add_argument("--date", required=True, help="Appointment date, DD/MM/YYYY")
    parser.add_argument("--service", required=True, help="Service name as shown in the form")
    parser.add_argument("--employee", default=DEFAULT_EMPLOYEE)
    parser.add_argument(
        "--time-preference",
        default=TimePreference.ANY_TIME.label,
        choices=[option.label for option in TimePreference],
    )
    parser.add_argument("--time", dest="specific_time", help='Specific slot, e.g. "02:00 PM"')
    parser.add_argument("--slot-index", type=int, default=0, help="Slot to pick when no time is given")
    parser.add_argument("--first-name", required=True)
    parser.add_argument("--last-name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--phone", required=True)
    parser.add_argument("--notes", default="")
    parser.add_argument("--url", help="Booking page URL (defaults to BOOKING_URL)")
    headless = parser.add_mutually_exclusive_group()
    headless.add_argument("--headless", dest="headless", action="store_true", default=None)
    headless.add_argument("--headed", dest="headless", action="store_false")
    parser.add_argument("--slow-mo", type=int, help="Delay between browser actions in ms")
    return parser


async def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_booking_settings()
    request = settings.build_request(
        date=args.date,
        service=args.service,
        employee=args.employee,
        time_preference=args.time_preference,
        specific_time=args.specific_time,
        time_slot_index=args.slot_index,
        customer=CustomerInfo(
            first_name=args.first_name,
            last_name=args.last_name,
            email=args.email,
            phone=args.phone,
            notes=args.notes,
        ),
        headless=args.headless,
        slow_mo=args.slow_mo,
    )
    if args.url:
        request = request.with_overrides(url=args.url)

    set_booking_id("cli")
    try:
        result = await book_appointment(request, settings)
    except ValidationError as exc:
        logger.error("Invalid booking request: %s", exc)
        return 2

    if result.ok:
        logger.info("Automation completed successfully (slot %s)", result.slot)
        return 0
    logger.error("Automation failed at %s: %s", result.failed_step, result.message)
    return 1


def main() -> None:
    load_dotenv()
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
