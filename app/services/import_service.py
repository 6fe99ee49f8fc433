import logging
import time
from typing import Optional, Sequence

from app.core.config import settings
from app.core.suppliers import SUPPLIER_BINDINGS, SupplierBinding
from app.models.pricelist import ImportOutcome
from app.services.database_service import DatabaseService
from app.services.import_reporter import ImportReporter
from app.services.pricelist_parser import parse_rows
from app.services.upsert_service import UpsertService
from app.services.workbook_reader import read_workbook

logger = logging.getLogger(__name__)


class PricelistImportService:
    def __init__(
        self,
        db_service: DatabaseService | None = None,
        upsert_service: UpsertService | None = None,
        header_rows: Optional[int] = None,
        bindings: Sequence[SupplierBinding] = SUPPLIER_BINDINGS,
    ):
        self.db = db_service or DatabaseService()
        self.upsert_service = upsert_service or UpsertService()
        self.header_rows = settings.pricelist_header_rows if header_rows is None else header_rows
        self.bindings = bindings

    def run_import(self, content: bytes, filename: Optional[str] = None) -> ImportOutcome:
        """Import one price list workbook.

        Raises ConfigurationError or WorkbookDecodeError before anything is
        written. Every later failure is reported in the returned stats.
        """
        start_time = time.time()
        self.db.ensure_configured()

        logger.info(f"Processing file: {filename}, size: {len(content)} bytes")
        grid = read_workbook(content)
        parsed = parse_rows(grid, self.bindings, self.header_rows)

        reporter = ImportReporter()
        reporter.product_rows(parsed.product_rows)
        reporter.categories(len(parsed.categories))
        for row_number, message in parsed.row_errors:
            reporter.row_error(row_number, message)

        self.upsert_service.upsert_products(parsed.products, self.db.open_store, reporter)

        stats = reporter.snapshot()
        duration = time.time() - start_time
        logger.info(
            f"Import complete in {duration:.2f}s: processed={stats.products_processed} "
            f"products_inserted={stats.products_inserted} products_updated={stats.products_updated} "
            f"prices_inserted={stats.prices_inserted} prices_updated={stats.prices_updated} "
            f"errors={len(stats.errors)}"
        )
        return ImportOutcome(
            stats=stats,
            status="partial" if stats.errors else "success",
            duration=duration,
            filename=filename,
            file_size=len(content),
        )
