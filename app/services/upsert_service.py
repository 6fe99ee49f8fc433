import logging
import time
from typing import Any, Callable, ContextManager, List, Optional, Tuple

from app.core.config import settings
from app.core.exceptions import DuplicateKeyError
from app.models.pricelist import ProductRecord, SupplierPrice
from app.services.import_reporter import (
    FAILED,
    INSERTED,
    UPDATED,
    ImportReporter,
    ProductUpsertResult,
)

logger = logging.getLogger(__name__)

StoreFactory = Callable[[], ContextManager[Any]]


class UpsertService:
    """Converges the product and price tables to an extracted price list.

    Products are matched by code and prices by (product id, supplier), so
    running the same list twice updates rows instead of duplicating them.
    Nothing is ever deleted. There is no transaction around a product: a
    product can be saved while one of its prices fails, and that failure is
    reported rather than rolled back.
    """

    def __init__(self, batch_size: Optional[int] = None):
        self.batch_size = max(1, batch_size or settings.pricelist_batch_size)

    def upsert_products(
        self,
        products: List[ProductRecord],
        open_store: StoreFactory,
        reporter: ImportReporter,
    ) -> None:
        """Upsert products batch by batch, one store session per batch."""
        total_batches = (len(products) + self.batch_size - 1) // self.batch_size
        for i in range(0, len(products), self.batch_size):
            batch = products[i:i + self.batch_size]
            batch_number = i // self.batch_size + 1
            batch_start = time.time()
            logger.info(f"Processing batch {batch_number}/{total_batches}: {len(batch)} products")

            done = 0
            try:
                with open_store() as store:
                    for product in batch:
                        reporter.record(self.upsert_product(store, product))
                        done += 1
            except Exception as e:
                logger.error(f"Batch {batch_number} store session failed: {str(e)}")
                for product in batch[done:]:
                    reporter.record(ProductUpsertResult(
                        code=product.code,
                        outcome=FAILED,
                        errors=[f"Product {product.code}: {str(e)}"],
                    ))

            logger.info(f"Batch {batch_number} finished in {time.time() - batch_start:.2f}s")

    def upsert_product(self, store: Any, product: ProductRecord) -> ProductUpsertResult:
        result = ProductUpsertResult(code=product.code, outcome=FAILED)
        try:
            product_id, created = self._upsert_product_row(store, product)
        except Exception as e:
            logger.warning(f"Product {product.code} failed: {str(e)}")
            result.errors.append(f"Product {product.code}: {str(e)}")
            return result

        result.product_id = product_id
        result.outcome = INSERTED if created else UPDATED

        for price in product.prices:
            try:
                created = self._upsert_price_row(store, product_id, price)
            except Exception as e:
                logger.warning(f"Price {product.code}/{price.supplier} failed: {str(e)}")
                result.errors.append(f"Price {product.code}/{price.supplier}: {str(e)}")
                continue
            if created:
                result.prices_inserted += 1
            else:
                result.prices_updated += 1

        return result

    def _upsert_product_row(self, store: Any, product: ProductRecord) -> Tuple[int, bool]:
        existing_id = store.find_product_id(product.code)
        if existing_id is None:
            try:
                return store.insert_product(product), True
            except DuplicateKeyError:
                # Another import inserted the same code in the meantime
                existing_id = store.find_product_id(product.code)
                if existing_id is None:
                    raise
        store.update_product(existing_id, product)
        return existing_id, False

    def _upsert_price_row(self, store: Any, product_id: int, price: SupplierPrice) -> bool:
        existing_id = store.find_price_id(product_id, price.supplier)
        if existing_id is None:
            try:
                store.insert_price(product_id, price)
                return True
            except DuplicateKeyError:
                existing_id = store.find_price_id(product_id, price.supplier)
                if existing_id is None:
                    raise
        store.update_price(existing_id, price)
        return False
