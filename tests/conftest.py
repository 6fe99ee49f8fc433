import io
import os
import sys
from contextlib import contextmanager
import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook

# Ensure project root is on sys.path for `import app`
_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _ROOT not in sys.path:
    sys.path.insert(0, _ROOT)

from app.main import app
from app.api import deps
from app.core.exceptions import ConfigurationError


class _InMemoryStore:
    """Keyed product/price tables with optional failure injection."""

    def __init__(self):
        self.products = {}
        self.prices = {}
        self._next_product_id = 1
        self._next_price_id = 1
        self.failing_codes = set()
        self.failing_suppliers = set()

    def find_product_id(self, code):
        if code in self.failing_codes:
            raise RuntimeError("lookup timed out")
        for product_id, row in self.products.items():
            if row["code"] == code:
                return product_id
        return None

    def insert_product(self, product):
        product_id = self._next_product_id
        self._next_product_id += 1
        self.products[product_id] = product.model_dump(exclude={"prices"})
        return product_id

    def update_product(self, product_id, product):
        self.products[product_id].update(product.model_dump(exclude={"prices", "code"}))

    def find_price_id(self, product_id, supplier):
        if supplier in self.failing_suppliers:
            raise RuntimeError("price table unavailable")
        for price_id, row in self.prices.items():
            if row["product_id"] == product_id and row["supplier"] == supplier:
                return price_id
        return None

    def insert_price(self, product_id, price):
        price_id = self._next_price_id
        self._next_price_id += 1
        self.prices[price_id] = {"product_id": product_id, **price.model_dump()}
        return price_id

    def update_price(self, price_id, price):
        self.prices[price_id].update(price.model_dump(exclude={"supplier"}))

    def product_by_code(self, code):
        return self.products[self.find_product_id(code)]

    def prices_for(self, code):
        product_id = self.find_product_id(code)
        return {row["supplier"]: row for row in self.prices.values() if row["product_id"] == product_id}


class _FakeDB:
    def __init__(self, store):
        self.store = store
        self.configured = True
        self.sessions = 0

    def ensure_configured(self):
        if not self.configured:
            raise ConfigurationError("Server configuration error: DB_SERVER and DB_NAME must be set")

    def test_connection(self) -> bool:
        return True

    @contextmanager
    def open_store(self):
        self.sessions += 1
        yield self.store

    def fetch_product_price_rows(self, search=None, limit=None):
        products = sorted(self.store.products.items(), key=lambda item: (item[1]["name"], item[0]))
        if search:
            term = search.lower()
            products = [
                (pid, p) for pid, p in products
                if any(term in (p.get(k) or "").lower() for k in ("name", "code", "article"))
            ]
        if limit is not None:
            products = products[:limit]
        rows = []
        for pid, p in products:
            base = {"Id": pid, "Code": p["code"], "Article": p["article"], "Name": p["name"],
                    "Barcode": p["barcode"], "Category": p["category"]}
            prices = [r for r in self.store.prices.values() if r["product_id"] == pid]
            if not prices:
                rows.append({**base, "Supplier": None, "Price": None})
            for r in prices:
                rows.append({**base, "Supplier": r["supplier"], "Price": r["price"]})
        return rows

    def fetch_prices(self, product_id=None):
        return [
            {"Id": price_id, "ProductId": r["product_id"], "Supplier": r["supplier"],
             "Price": r["price"], "Currency": r["currency"]}
            for price_id, r in self.store.prices.items()
            if product_id is None or r["product_id"] == product_id
        ]

    def fetch_product_totals(self):
        categories = {p["category"] for p in self.store.products.values() if p["category"]}
        return {"TotalProducts": len(self.store.products), "TotalCategories": len(categories)}

    def fetch_price_totals(self):
        known = [r["price"] for r in self.store.prices.values() if r["price"] is not None]
        return {
            "TotalPrices": len(self.store.prices),
            "TotalSuppliers": len({r["supplier"] for r in self.store.prices.values()}),
            "MinPrice": min(known) if known else None,
            "MaxPrice": max(known) if known else None,
            "AvgPrice": sum(known) / len(known) if known else None,
        }

    def fetch_suppliers(self):
        return sorted({r["supplier"] for r in self.store.prices.values()})


@pytest.fixture()
def store():
    return _InMemoryStore()


@pytest.fixture()
def fake_db(store):
    return _FakeDB(store)


@pytest.fixture(autouse=True)
def _override_dependencies(fake_db):
    app.dependency_overrides[deps.get_database_service] = lambda: fake_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def client():
    return TestClient(app)


HEADER_ROWS = [
    ["Прайс-лист"],
    [],
    ["Код", "Артикул", "Номенклатура", "Штрихкод", "Реалист"],
    [None, None, None, None, "Цена", "Валюта"],
]


@pytest.fixture()
def make_workbook():
    """Build xlsx bytes with the four standard header rows followed by `rows`."""
    def _make(rows, with_headers=True):
        wb = Workbook()
        ws = wb.active
        for row in (HEADER_ROWS if with_headers else []) + list(rows):
            ws.append(row)
        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()
    return _make


def price_row(code, article, name, barcode, **supplier_cells):
    """A product row with cells placed at absolute column indexes, e.g. c4=10.5."""
    row = [code, article, name, barcode] + [None] * 25
    for key, value in supplier_cells.items():
        row[int(key[1:])] = value
    return row


@pytest.fixture()
def make_row():
    return price_row
