from typing import NamedTuple, Tuple


class SupplierBinding(NamedTuple):
    """Where a supplier's price and currency live in a price list row."""

    name: str
    price_col: int
    currency_col: int


# Column 16 carries no supplier data.
SUPPLIER_BINDINGS: Tuple[SupplierBinding, ...] = (
    SupplierBinding("Реалист", 4, 5),
    SupplierBinding("Поставщик 1", 6, 7),
    SupplierBinding("Поставщик 2", 8, 9),
    SupplierBinding("Поставщик 3", 10, 11),
    SupplierBinding("Поставщик 7", 12, 13),
    SupplierBinding("Розничные", 14, 15),
    SupplierBinding("ВсеИнструменты", 17, 18),
    SupplierBinding("ДНС", 19, 20),
    SupplierBinding("Компсервис", 21, 22),
    SupplierBinding("Комус", 23, 24),
    SupplierBinding("Минск", 25, 26),
    SupplierBinding("Смартон", 27, 28),
)
