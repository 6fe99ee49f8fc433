from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal, InvalidOperation
from functools import reduce
from itertools import islice
import logging
from typing import Any, List, Optional, Sequence, Tuple

from app.core.suppliers import SUPPLIER_BINDINGS, SupplierBinding
from app.models.pricelist import ProductRecord, SupplierPrice

logger = logging.getLogger(__name__)

CODE_COL = 0
ARTICLE_COL = 1
NAME_COL = 2
BARCODE_COL = 3

DEFAULT_PRODUCT_NAME = "Unnamed Product"


@dataclass
class ParseState:
    """Accumulator threaded through the row scan."""
    current_category: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    products: List[ProductRecord] = field(default_factory=list)
    product_rows: int = 0
    row_errors: List[Tuple[int, str]] = field(default_factory=list)


def cell(row: Sequence[Any], index: int) -> Any:
    if index < len(row):
        return row[index]
    return None


def cell_text(value: Any) -> str:
    """Render a cell as trimmed text; empty cells become ''."""
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        # Codes and barcodes typed as numbers come back as 1001.0
        return str(int(value))
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value).strip()


def parse_price(value: Any) -> Optional[Decimal]:
    """Parse a price cell; anything that is not a finite number is absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        text = str(value)
    else:
        text = str(value).strip().replace('\xa0', '').replace(' ', '')
        if not text:
            return None
        if ',' in text and '.' not in text:
            text = text.replace(',', '.')
    try:
        price = Decimal(text)
    except InvalidOperation:
        return None
    if not price.is_finite():
        return None
    return price


def extract_prices(row: Sequence[Any], bindings: Sequence[SupplierBinding]) -> List[SupplierPrice]:
    prices = []
    for binding in bindings:
        price = parse_price(cell(row, binding.price_col))
        currency = cell_text(cell(row, binding.currency_col)) or None
        # A supplier with neither value is left out entirely
        if price is not None or currency is not None:
            prices.append(SupplierPrice(supplier=binding.name, price=price, currency=currency))
    return prices


def extract_product(
    row: Sequence[Any],
    category: Optional[str],
    bindings: Sequence[SupplierBinding] = SUPPLIER_BINDINGS,
) -> ProductRecord:
    return ProductRecord(
        code=cell_text(cell(row, CODE_COL)),
        article=cell_text(cell(row, ARTICLE_COL)) or None,
        name=cell_text(cell(row, NAME_COL)) or DEFAULT_PRODUCT_NAME,
        barcode=cell_text(cell(row, BARCODE_COL)) or None,
        category=category,
        prices=extract_prices(row, bindings),
    )


def _scan_row(
    state: ParseState,
    numbered_row: Tuple[int, Optional[Sequence[Any]]],
    bindings: Sequence[SupplierBinding],
) -> ParseState:
    index, row = numbered_row
    if not row:
        return state

    code = cell_text(cell(row, CODE_COL))
    name = cell_text(cell(row, NAME_COL))

    if not code and name:
        state.current_category = name
        if name not in state.categories:
            state.categories.append(name)
        logger.debug(f"Found category at row {index + 1}: {name}")
        return state

    if code:
        state.product_rows += 1
        try:
            state.products.append(extract_product(row, state.current_category, bindings))
        except Exception as e:
            logger.warning(f"Skipping row {index + 1}: {str(e)}")
            state.row_errors.append((index + 1, str(e) or "Parse error"))

    return state


def parse_rows(
    grid: Sequence[Optional[Sequence[Any]]],
    bindings: Sequence[SupplierBinding] = SUPPLIER_BINDINGS,
    header_rows: int = 4,
) -> ParseState:
    """Classify the rows of a price list and extract its products.

    Rows before ``header_rows`` are titles and column headers. A row with an
    empty code and a non-empty name is a category marker: every product row
    below it belongs to that category until the next marker. Product rows
    before the first marker have no category.
    """
    numbered = islice(enumerate(grid), header_rows, None)
    state = reduce(lambda acc, item: _scan_row(acc, item, bindings), numbered, ParseState())
    logger.info(
        f"Parsed {len(state.products)} products from {len(state.categories)} categories "
        f"({len(state.row_errors)} rows failed)"
    )
    return state
