"""Shared test fixtures for the rental market pipeline."""

import sys
from pathlib import Path

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.common.config import AggregatorSettings, CollectorSettings, StoreSettings, get_settings
from src.common.store import SupabaseStore


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(autouse=True)
def fresh_settings():
    """Reload shared settings per test so env changes take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# --- In-memory Supabase client ---


class FakeResult:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Chainable stand-in for a PostgREST query builder."""

    def __init__(self, client: "FakeSupabaseClient", table: str):
        self.client = client
        self.table = table
        self.op = None
        self.payload = None
        self.on_conflict = None
        self.filters: list[tuple] = []
        self.orders: list[str] = []
        self.range_args = None

    def upsert(self, data, on_conflict=None):
        self.op, self.payload, self.on_conflict = "upsert", data, on_conflict
        return self

    def insert(self, data):
        self.op, self.payload = "insert", data
        return self

    def select(self, columns):
        self.op, self.payload = "select", columns
        return self

    def gt(self, column, value):
        self.filters.append(("gt", column, value))
        return self

    def order(self, column):
        self.orders.append(column)
        return self

    def range(self, start, end):
        self.range_args = (start, end)
        return self

    def execute(self):
        self.client.queries.append(self)
        if self.table in self.client.fail_tables:
            raise RuntimeError(f"write to {self.table} rejected")

        rows = self.client.tables.setdefault(self.table, [])
        if self.op == "select":
            if self.client.fail_reads:
                raise RuntimeError("read timed out")
            start, end = self.range_args
            return FakeResult(self.client.select_rows[start:end + 1])
        if self.op == "insert":
            rows.append(dict(self.payload))
            return FakeResult([self.payload])
        if self.op == "upsert":
            keys = self.on_conflict.split(",")
            for i, row in enumerate(rows):
                if all(row.get(k) == self.payload.get(k) for k in keys):
                    rows[i] = dict(self.payload)
                    break
            else:
                rows.append(dict(self.payload))
            return FakeResult([self.payload])
        raise AssertionError(f"unexpected op {self.op}")


class FakeSupabaseClient:
    """Applies upserts/inserts to in-memory tables; serves canned selects."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.queries: list[FakeQuery] = []
        self.select_rows: list[dict] = []
        self.fail_tables: set[str] = set()
        self.fail_reads = False

    def table(self, name):
        return FakeQuery(self, name)


@pytest.fixture
def fake_client() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def store(fake_client) -> SupabaseStore:
    """SupabaseStore wired to the in-memory client."""
    return SupabaseStore(
        supabase_url="https://test.supabase.co",
        supabase_key="test-key",
        store_settings=StoreSettings(),
        client=fake_client,
    )


# --- Fake Playwright page / elements ---


class FakeElement:
    """Minimal async ElementHandle: attributes, text, nested queries."""

    def __init__(self, text: str = "", attrs: dict | None = None, children: dict | None = None):
        self.text = text
        self.attrs = attrs or {}
        self.children = children or {}

    async def get_attribute(self, name):
        return self.attrs.get(name)

    async def text_content(self):
        return self.text

    async def query_selector(self, selector):
        found = self.children.get(selector) or []
        return found[0] if found else None

    async def query_selector_all(self, selector):
        return list(self.children.get(selector) or [])


class FakeSession:
    """Stands in for BrowserSession: serves one fake page per URL substring."""

    def __init__(self, pages: dict[str, FakeElement] | None = None, fail_on: tuple = ()):
        self.pages = pages or {}
        self.fail_on = fail_on
        self.visited: list[str] = []
        self.page = FakeElement()

    async def goto(self, url):
        self.visited.append(url)
        for marker in self.fail_on:
            if marker in url:
                raise TimeoutError(f"Timeout 120000ms exceeded navigating to {url}")
        for marker, page in self.pages.items():
            if marker in url:
                self.page = page
                return
        self.page = FakeElement()


def make_card(
    href: str | None = "/us/en/car-rental/united-states/san-francisco-ca/honda/civic/111?searchId=abc",
    title: str = "2020 Honda Civic LX",
    price: str = "$85/day",
    meta: str = "4.9 · 132 trips",
    nested_link: bool = False,
) -> FakeElement:
    """A result card using the current data-test markup."""
    attrs = {}
    children = {
        '[data-test="vehicle-card-title"]': [FakeElement(title)],
        '[data-test="vehicle-card-price"]': [FakeElement(price)],
        '[data-test="vehicle-card-meta"]': [FakeElement(meta)],
    }
    if nested_link:
        children['a[href*="/car-rental/"]'] = [FakeElement(attrs={"href": href})]
    elif href is not None:
        attrs["href"] = href
    return FakeElement(attrs=attrs, children=children)


def make_page(cards: list[FakeElement], selector: str = '[data-test="vehicle-card"]') -> FakeElement:
    return FakeElement(children={selector: cards})


@pytest.fixture
def collector_config() -> CollectorSettings:
    """Collector settings with every politeness delay disabled."""
    return CollectorSettings(
        card_delay_seconds=0,
        target_delay_seconds=0,
        request_delay_ms=0,
        settle_delay_ms=0,
    )


@pytest.fixture
def aggregator_config() -> AggregatorSettings:
    return AggregatorSettings(window_days=30)
