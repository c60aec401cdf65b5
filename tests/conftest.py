"""Shared test fixtures and helpers."""

from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from automation import BookingSettings, CustomerInfo
from automation import tasks


class FakeElement:
    """Stands in for a Playwright locator resolving to exactly one element."""

    def __init__(
        self,
        name: str,
        text: str = "",
        *,
        attrs: Optional[Dict[str, str]] = None,
        visible: bool = True,
        checked: bool = False,
        error: Optional[Exception] = None,
    ) -> None:
        self.name = name
        self.text = text
        self.attrs = attrs or {}
        self.visible = visible
        self.checked = checked
        self.error = error
        self.value = ""
        self.log: List[tuple] = []

    def _record(self, *entry) -> None:
        if self.error is not None:
            raise self.error
        self.log.append(entry)

    async def is_visible(self) -> bool:
        return self.visible

    async def click(self) -> None:
        self._record("click", self.name)

    async def fill(self, value: str) -> None:
        self._record("fill", self.name, value)
        self.value = value

    async def clear(self) -> None:
        self._record("clear", self.name)
        self.value = ""

    async def press_sequentially(self, text: str, delay: float = 0) -> None:
        self._record("type", self.name, text)
        self.value += text

    async def press(self, key: str) -> None:
        self._record("press", self.name, key)

    async def text_content(self) -> str:
        return self.text

    async def get_attribute(self, name: str) -> Optional[str]:
        return self.attrs.get(name)

    async def is_checked(self) -> bool:
        return self.checked

    async def uncheck(self) -> None:
        self._record("uncheck", self.name)
        self.checked = False


class FakeLocator:
    def __init__(self, elements: List[FakeElement]) -> None:
        self._elements = elements

    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self._elements[:1])

    async def count(self) -> int:
        return len(self._elements)

    async def all(self) -> List[FakeElement]:
        return list(self._elements)

    def _only(self) -> FakeElement:
        if not self._elements:
            raise AssertionError("action on a locator that matches nothing")
        return self._elements[0]

    def __getattr__(self, name):
        return getattr(self._only(), name)


class FakeKeyboard:
    def __init__(self, log: List[tuple]) -> None:
        self._log = log

    async def press(self, key: str) -> None:
        self._log.append(("key", key))

    async def type(self, text: str, delay: float = 0) -> None:
        self._log.append(("keyboard-type", text))


class FakePage:
    def __init__(self) -> None:
        self.log: List[tuple] = []
        self.elements: Dict[str, List[FakeElement]] = {}
        self.keyboard = FakeKeyboard(self.log)
        self.url = "about:blank"

    def add(self, selector: str, *elements: FakeElement) -> None:
        for element in elements:
            element.log = self.log
        self.elements.setdefault(selector, []).extend(elements)

    def locator(self, selector: str, **kwargs) -> FakeLocator:
        return FakeLocator(self.elements.get(selector, []))

    async def wait_for_timeout(self, timeout: float) -> None:
        return None

    def actions(self, kind: str) -> List[tuple]:
        return [entry for entry in self.log if entry[0] == kind]


class FakeBrowser:
    def __init__(self, page: FakePage) -> None:
        self.page = page
        self.launch_options: Dict[str, object] = {}
        self.opened = False
        self.closed = False

    def __call__(self, **options) -> "FakeBrowser":
        self.launch_options = options
        return self

    async def __aenter__(self) -> "FakeBrowser":
        self.opened = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.closed = True

    async def goto(self, url: str) -> str:
        self.page.log.append(("goto", url))
        self.page.url = url
        return url


@pytest.fixture
def settings() -> BookingSettings:
    return BookingSettings(
        url="https://salon.example/booking",
        settle_delay_ms=0,
        post_submit_delay_ms=0,
    )


@pytest.fixture
def customer() -> CustomerInfo:
    return CustomerInfo(
        first_name="John",
        last_name="Doe",
        email="john.doe@example.com",
        phone="5551234567",
        notes="First time visit",
    )


@pytest.fixture
def booking_page() -> FakePage:
    """A page offering every control of the booking form."""
    page = FakePage()
    page.add(tasks.DATE_INPUT_SELECTOR, FakeElement("date"))
    page.add(
        tasks.DROPDOWN_WRAPPER_SELECTOR,
        FakeElement("date-dropdown"),
        FakeElement("hidden-dropdown", visible=False),
        FakeElement("time-dropdown"),
        FakeElement("employee-dropdown"),
    )
    page.add(tasks.SERVICE_INPUT_SELECTOR, FakeElement("service"))
    page.add(
        tasks.SERVICE_OPTION_SELECTOR,
        FakeElement("option-deluxe", "  Curly Cut Deluxe "),
        FakeElement("option-curly", " curly cut "),
    )
    page.add(tasks.SHOW_TIMES_SELECTOR, FakeElement("show-times", "Show Available Times"))
    page.add(
        tasks.SLOT_SELECTOR_STRATEGIES[0][1],
        FakeElement("slot-1000", "10:00 AM"),
        FakeElement("slot-1100", "11:00 AM"),
        FakeElement("slot-1230", "12:30 PM"),
    )
    page.add(
        tasks.TEXT_INPUT_SELECTOR,
        FakeElement("first", attrs={"name": "clientFirstName"}),
        FakeElement("last", attrs={"id": "clientLastName"}),
        FakeElement("address", attrs={"name": "address", "placeholder": "Street"}),
    )
    page.add(tasks.EMAIL_INPUT_SELECTOR, FakeElement("email"))
    page.add(tasks.PHONE_INPUT_SELECTOR, FakeElement("phone"))
    page.add(tasks.NOTES_SELECTOR, FakeElement("notes"))
    page.add(tasks.CONTINUE_SELECTOR, FakeElement("continue", "Continue"))
    page.add(tasks.CREATE_ACCOUNT_SELECTOR, FakeElement("create-account", checked=True))
    page.add(tasks.SUBMIT_SELECTORS[0][1], FakeElement("book", " Book Appointment "))
    return page


@pytest.fixture
def fake_browser(booking_page: FakePage) -> FakeBrowser:
    return FakeBrowser(booking_page)
