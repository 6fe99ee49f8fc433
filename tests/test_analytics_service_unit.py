from decimal import Decimal

from app.services.analytics_service import AnalyticsService


def _row(pid, code, supplier=None, price=None):
    return {"Id": pid, "Code": code, "Article": None, "Name": code.lower(), "Barcode": None,
            "Category": None, "Supplier": supplier, "Price": price}


def test_group_products_collects_supplier_prices():
    rows = [
        _row(1, "A", "Реалист", Decimal("10.50")),
        _row(1, "A", "ДНС", None),
        _row(1, "A", "Комус", Decimal("4")),
        _row(2, "B"),
    ]
    products = AnalyticsService().group_products(rows)
    assert [p.code for p in products] == ["A", "B"]
    a, b = products
    assert a.supplier_prices == {"Реалист": 10.5, "ДНС": None, "Комус": 4.0}
    assert (a.lowest_price, a.highest_price) == (4.0, 10.5)
    assert b.supplier_prices == {}
    assert b.lowest_price is None


def test_build_overview_defaults_to_zero():
    overview = AnalyticsService().build_overview(
        {"TotalProducts": 0, "TotalCategories": 0},
        {"TotalPrices": 0, "TotalSuppliers": 0, "MinPrice": None, "MaxPrice": None, "AvgPrice": None},
    )
    assert overview.total_products == 0
    assert overview.total_prices == 0
    assert overview.price_range.avg == 0.0


def test_to_price_rows_converts_decimals():
    rows = AnalyticsService().to_price_rows([
        {"Id": 3, "ProductId": 1, "Supplier": "Минск", "Price": Decimal("2.5"), "Currency": "BYN"},
    ])
    assert rows[0].price == 2.5
    assert rows[0].currency == "BYN"
