from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from playwright.async_api import Error as PlaywrightError

from .browser import HeadlessBrowser
from .config import BookingSettings
from .errors import (
    BookingAutomationError,
    ElementNotFoundError,
    NoCandidateError,
    ValidationError,
)
from .models import (
    BookingRequest,
    BookingResult,
    BookingTaskState,
    StepReport,
    StepStatus,
    TimePreference,
)
from .timeslots import (
    TimeSlotCandidate,
    choose_slot,
    classify_name_field,
    looks_like_time,
    service_option_index,
)

logger = logging.getLogger(__name__)

DATE_INPUT_SELECTOR = 'input[placeholder*="Date"], input[type="text"]'
DROPDOWN_WRAPPER_SELECTOR = "span.k-dropdown-wrap, span.k-picker-wrap"
SERVICE_INPUT_SELECTOR = (
    'input.ui-combobox-input.ui-autocomplete-input[placeholder="Select Service"]'
)
SERVICE_OPTION_SELECTOR = ".ui-menu-item:visible"
SHOW_TIMES_SELECTOR = "a.button.booking-event:visible"
SHOW_TIMES_TEXT = "Show Available Times"
TEXT_INPUT_SELECTOR = 'input[type="text"]:visible, input:not([type]):visible'
EMAIL_INPUT_SELECTOR = 'input[type="email"][name="clientEmail"]:visible'
PHONE_INPUT_SELECTOR = 'input[type="tel"]:visible'
NOTES_SELECTOR = "textarea:visible"
CONTINUE_SELECTOR = (
    'a.button.booking-event[data-event="ProcessClientInfo"][data-submit="true"]:visible'
)
CREATE_ACCOUNT_SELECTOR = (
    'input[type="checkbox"][name*="account" i]:visible, '
    'input[type="checkbox"][id*="account" i]:visible'
)

# Dropdown wrappers in on-screen order: 0 date, 1 time of day, 2 employee.
TIME_PREFERENCE_DROPDOWN = 1
EMPLOYEE_DROPDOWN = 2

# Tried in order until one of them yields visible elements.
SLOT_SELECTOR_STRATEGIES: Tuple[Tuple[str, str], ...] = (
    ("am-pm-buttons", 'button:has-text("AM"), button:has-text("PM")'),
    ("am-pm-links", 'a:has-text("AM"), a:has-text("PM")'),
    ("role-buttons", 'div[role="button"]:has-text(":")'),
    (
        "slot-classes",
        '[class*="time-slot"], [class*="timeSlot"], [class*="appointment-time"]',
    ),
)
SLOT_FALLBACK_SELECTOR = "button:visible"

# Widget-specific control first, then generic text and role matches.
SUBMIT_SELECTORS: Tuple[Tuple[str, str], ...] = (
    (
        "widget-submit",
        'a.button.booking-event[data-submit="true"]'
        ':not([data-event="ProcessClientInfo"]):visible',
    ),
    ("book-button", 'button:has-text("Book"):visible'),
    ("confirm-button", 'button:has-text("Confirm"):visible'),
    ("submit-button", 'button:has-text("Submit"):visible'),
    ("complete-button", 'button:has-text("Complete"):visible'),
    ("submit-type-button", 'button[type="submit"]:visible'),
    ("submit-type-input", 'input[type="submit"]:visible'),
)

StepOutcome = Tuple[StepStatus, str]
BrowserFactory = Callable[..., Any]


class BookingSequencer:
    """
    Drive the salon booking form through its fixed sequence of steps.

    Each step either succeeds, degrades to a logged fallback or raises a
    ``BookingAutomationError``; the first error stops the run. The browser is
    closed whatever the outcome.
    """

    def __init__(
        self,
        request: BookingRequest,
        settings: BookingSettings,
        *,
        browser_factory: Optional[BrowserFactory] = None,
    ) -> None:
        self._request = request
        self._settings = settings
        self._browser_factory = browser_factory or HeadlessBrowser
        self._chosen_slot: Optional[str] = None

    @property
    def steps(self) -> Tuple[Tuple[str, Callable[[Any], Awaitable[StepOutcome]]], ...]:
        return (
            ("load_page", self._load_page),
            ("set_date", self._set_date),
            ("select_time_preference", self._select_time_preference),
            ("select_service", self._select_service),
            ("select_employee", self._select_employee),
            ("show_times", self._show_times),
            ("select_time_slot", self._select_time_slot),
            ("fill_customer_info", self._fill_customer_info),
            ("submit_booking", self._submit_booking),
        )

    async def run(self) -> BookingResult:
        request = self._request
        missing = request.missing_fields()
        if missing:
            raise ValidationError(missing)

        logger.info(
            "Booking %s with %s on %s (time=%s, preference=%s, slot index=%s)",
            request.service,
            request.employee,
            request.date,
            request.specific_time or "-",
            request.time_preference.label,
            request.time_slot_index,
        )
        result: Optional[BookingResult] = None
        try:
            async with self._browser_factory(
                headless=request.headless,
                slow_mo=request.slow_mo,
                timeout=self._settings.navigation_timeout,
                viewport=(self._settings.viewport_width, self._settings.viewport_height),
            ) as browser:
                result = await self._run_steps(browser)
                if result.ok and self._settings.post_submit_delay_ms:
                    logger.info(
                        "Keeping the confirmation page open for %sms",
                        self._settings.post_submit_delay_ms,
                    )
                    await asyncio.sleep(self._settings.post_submit_delay_ms / 1000)
        except PlaywrightError as exc:
            if result is not None:
                # The form was already driven; a failed close must not rewrite the outcome.
                logger.warning("Browser teardown failed after %s: %s", result.state.name, exc)
                return result
            logger.error("Browser session failed: %s", exc)
            return BookingResult(
                state=BookingTaskState.FAILED,
                message=f"Browser session failed: {exc}",
                failed_step="browser",
            )
        return result

    async def _run_steps(self, browser) -> BookingResult:
        reports: List[StepReport] = []
        total = len(self.steps)
        for position, (name, step) in enumerate(self.steps, start=1):
            logger.info("Step %d/%d: %s", position, total, name)
            try:
                status, detail = await step(browser)
            except BookingAutomationError as exc:
                message = str(exc)
            except PlaywrightError as exc:
                message = f"Browser error during {name}: {exc}"
            else:
                if status is StepStatus.DEGRADED:
                    logger.warning("%s degraded: %s", name, detail)
                else:
                    logger.info("%s: %s", name, detail)
                reports.append(StepReport(name=name, status=status, detail=detail))
                continue

            logger.error("%s failed: %s", name, message)
            reports.append(StepReport(name=name, status=StepStatus.FAILED, detail=message))
            return BookingResult(
                state=BookingTaskState.FAILED,
                message=message,
                failed_step=name,
                steps=reports,
            )

        return BookingResult(
            state=BookingTaskState.COMPLETED,
            message="Booking submitted.",
            slot=self._chosen_slot,
            steps=reports,
        )

    async def _load_page(self, browser) -> StepOutcome:
        final_url = await browser.goto(self._request.url)
        await browser.page.wait_for_timeout(self._settings.settle_delay_ms)
        return StepStatus.OK, f"loaded {final_url}"

    async def _set_date(self, browser) -> StepOutcome:
        page = browser.page
        date_input = page.locator(DATE_INPUT_SELECTOR).first
        if await date_input.count() == 0:
            raise ElementNotFoundError("Date input not found on the booking form.")

        await date_input.clear()
        await date_input.fill(self._request.date)
        await page.wait_for_timeout(500)
        # Typing opens a calendar overlay; close it and move focus on.
        await page.keyboard.press("Escape")
        await page.wait_for_timeout(300)
        await page.keyboard.press("Tab")
        await page.wait_for_timeout(500)
        return StepStatus.OK, f"date set to {self._request.date}"

    async def _select_time_preference(self, browser) -> StepOutcome:
        preference = self._request.time_preference
        if preference is TimePreference.ANY_TIME:
            return StepStatus.OK, "kept form default (any time)"

        page = browser.page
        await page.wait_for_timeout(500)
        dropdowns = await _visible(page.locator(DROPDOWN_WRAPPER_SELECTOR))
        if len(dropdowns) <= TIME_PREFERENCE_DROPDOWN:
            return (
                StepStatus.DEGRADED,
                f"time dropdown not found ({len(dropdowns)} visible dropdowns)",
            )

        await dropdowns[TIME_PREFERENCE_DROPDOWN].click()
        await page.wait_for_timeout(500)
        await page.keyboard.press("ArrowDown")
        await page.wait_for_timeout(300)
        for _ in range(preference.index):
            await page.keyboard.press("ArrowDown")
            await page.wait_for_timeout(100)
        await page.keyboard.press("Enter")
        await page.wait_for_timeout(500)
        return StepStatus.OK, f"time preference set to {preference.label}"

    async def _select_service(self, browser) -> StepOutcome:
        page = browser.page
        service = self._request.service
        await page.wait_for_timeout(1_000)
        service_input = page.locator(SERVICE_INPUT_SELECTOR).first
        if await service_input.count() == 0:
            return StepStatus.DEGRADED, "service input not found"

        await service_input.click()
        await page.wait_for_timeout(500)
        await service_input.fill("")
        await service_input.press_sequentially(service, delay=150)
        await page.wait_for_timeout(1_000)

        options = await page.locator(SERVICE_OPTION_SELECTOR).all()
        texts = [await option.text_content() or "" for option in options]
        match = service_option_index(texts, service)
        if match is not None:
            await options[match].click()
            await page.wait_for_timeout(500)
            return StepStatus.OK, f"service {texts[match].strip()!r} selected by exact match"
        if options:
            await options[0].click()
            await page.wait_for_timeout(500)
            return (
                StepStatus.DEGRADED,
                f"no exact match for {service!r}, picked first suggestion {texts[0].strip()!r}",
            )
        await service_input.press("Enter")
        await page.wait_for_timeout(500)
        return StepStatus.DEGRADED, f"no suggestions for {service!r}, confirmed typed text"

    async def _select_employee(self, browser) -> StepOutcome:
        page = browser.page
        employee = self._request.employee
        await page.wait_for_timeout(1_000)
        dropdowns = await _visible(page.locator(DROPDOWN_WRAPPER_SELECTOR))
        if len(dropdowns) <= EMPLOYEE_DROPDOWN:
            return (
                StepStatus.DEGRADED,
                f"employee dropdown not found ({len(dropdowns)} visible dropdowns)",
            )

        await dropdowns[EMPLOYEE_DROPDOWN].click()
        await page.wait_for_timeout(1_000)
        await page.keyboard.type(employee, delay=200)
        await page.wait_for_timeout(1_000)
        await page.keyboard.press("Enter")
        await page.wait_for_timeout(500)
        return StepStatus.OK, f"employee {employee!r} typed"

    async def _show_times(self, browser) -> StepOutcome:
        page = browser.page
        button = page.locator(SHOW_TIMES_SELECTOR, has_text=SHOW_TIMES_TEXT).first
        if await button.count() == 0:
            return StepStatus.DEGRADED, f"{SHOW_TIMES_TEXT!r} button not found"
        await button.click()
        await page.wait_for_timeout(3_000)
        return StepStatus.OK, "requested available times"

    async def _select_time_slot(self, browser) -> StepOutcome:
        page = browser.page
        await page.wait_for_timeout(2_000)
        candidates, source = await self._collect_slots(page)
        if not candidates:
            raise NoCandidateError("No time slots found on the page.")

        chosen, rule = choose_slot(
            candidates,
            specific_time=self._request.specific_time,
            index=self._request.time_slot_index,
        )
        if chosen is None:
            raise NoCandidateError("No time slot could be chosen on the page.")
        if self._request.specific_time and rule != "exact-text":
            logger.warning(
                "Requested %s not offered exactly, using %s (%s)",
                self._request.specific_time,
                chosen.text,
                rule,
            )
        await chosen.element.click()
        self._chosen_slot = chosen.text
        await page.wait_for_timeout(1_000)
        # The customer form renders after the slot click.
        await page.wait_for_timeout(2_000)
        return (
            StepStatus.OK,
            f"picked {chosen.text!r} via {rule} from {len(candidates)} {source} slots",
        )

    async def _collect_slots(self, page) -> Tuple[List[TimeSlotCandidate], str]:
        for name, selector in SLOT_SELECTOR_STRATEGIES:
            elements = await _visible(page.locator(selector))
            if elements:
                return [
                    TimeSlotCandidate.from_text(await element.text_content() or "", element)
                    for element in elements
                ], name

        candidates: List[TimeSlotCandidate] = []
        for button in await page.locator(SLOT_FALLBACK_SELECTOR).all():
            text = await button.text_content()
            if looks_like_time(text):
                candidates.append(TimeSlotCandidate.from_text(text or "", button))
        return candidates, "fallback-button"

    async def _fill_customer_info(self, browser) -> StepOutcome:
        page = browser.page
        customer = self._request.customer
        await page.wait_for_timeout(1_000)

        values = {"first_name": customer.first_name, "last_name": customer.last_name}
        filled: List[str] = []
        inputs = await page.locator(TEXT_INPUT_SELECTOR).all()
        for field_input in inputs:
            target = classify_name_field(
                await field_input.get_attribute("name"),
                await field_input.get_attribute("id"),
                await field_input.get_attribute("placeholder"),
            )
            if target is None:
                continue
            await field_input.fill(values[target])
            filled.append(target)

        email_input = page.locator(EMAIL_INPUT_SELECTOR).first
        if await email_input.count() > 0:
            await email_input.fill(customer.email)
            filled.append("email")
        else:
            logger.warning('Email input with name="clientEmail" not found')

        phone_input = page.locator(PHONE_INPUT_SELECTOR).first
        if await phone_input.count() > 0:
            await phone_input.fill(customer.phone)
            filled.append("phone")

        if customer.notes:
            notes_field = page.locator(NOTES_SELECTOR).first
            if await notes_field.count() > 0:
                await notes_field.fill(customer.notes)
                filled.append("notes")

        continue_button = page.locator(CONTINUE_SELECTOR).first
        if await continue_button.count() == 0:
            raise NoCandidateError("Continue button not found after filling customer info.")
        await continue_button.click()
        await page.wait_for_timeout(2_000)
        return StepStatus.OK, f"filled {', '.join(filled) or 'nothing'} of {len(inputs)} text inputs"

    async def _submit_booking(self, browser) -> StepOutcome:
        page = browser.page
        create_account = page.locator(CREATE_ACCOUNT_SELECTOR).first
        if await create_account.count() > 0 and await create_account.is_checked():
            await create_account.uncheck()
            logger.info("Unchecked account creation")

        for name, selector in SUBMIT_SELECTORS:
            button = page.locator(selector).first
            if await button.count() == 0:
                continue
            label = (await button.text_content() or "").strip() or name
            await button.click()
            await page.wait_for_timeout(3_000)
            return StepStatus.OK, f"clicked {label!r} ({name})"

        raise NoCandidateError("Submit button not found; the form was not submitted.")


async def book_appointment(
    request: BookingRequest,
    settings: BookingSettings,
    *,
    browser_factory: Optional[BrowserFactory] = None,
) -> BookingResult:
    """Run one booking and return its result; raises ``ValidationError`` before launching a browser."""
    sequencer = BookingSequencer(request, settings, browser_factory=browser_factory)
    return await sequencer.run()


async def _visible(locator) -> list:
    return [element for element in await locator.all() if await element.is_visible()]
