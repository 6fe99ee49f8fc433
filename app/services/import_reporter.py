from dataclasses import dataclass, field
from typing import List, Optional

from app.models.pricelist import ImportStats

INSERTED = "inserted"
UPDATED = "updated"
FAILED = "failed"


@dataclass
class ProductUpsertResult:
    """Outcome of upserting one product and its prices."""
    code: str
    outcome: str
    product_id: Optional[int] = None
    prices_inserted: int = 0
    prices_updated: int = 0
    errors: List[str] = field(default_factory=list)


class ImportReporter:
    """Collects counters and error messages for one import run."""

    def __init__(self):
        self.products_processed = 0
        self.products_inserted = 0
        self.products_updated = 0
        self.prices_inserted = 0
        self.prices_updated = 0
        self.categories_found = 0
        self.errors: List[str] = []

    def product_rows(self, count: int) -> None:
        self.products_processed += count

    def categories(self, count: int) -> None:
        self.categories_found += count

    def row_error(self, row_number: int, message: str) -> None:
        self.errors.append(f"Row {row_number}: {message}")

    def record(self, result: ProductUpsertResult) -> None:
        if result.outcome == INSERTED:
            self.products_inserted += 1
        elif result.outcome == UPDATED:
            self.products_updated += 1
        self.prices_inserted += result.prices_inserted
        self.prices_updated += result.prices_updated
        # A product's messages stay contiguous in the error list
        self.errors.extend(result.errors)

    def snapshot(self) -> ImportStats:
        return ImportStats(
            products_processed=self.products_processed,
            products_inserted=self.products_inserted,
            products_updated=self.products_updated,
            prices_inserted=self.prices_inserted,
            prices_updated=self.prices_updated,
            categories_found=self.categories_found,
            errors=tuple(self.errors),
        )
