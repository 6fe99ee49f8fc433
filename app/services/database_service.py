from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional
from app.core.database import db_manager
from app.core.exceptions import DuplicateKeyError
from app.models.pricelist import ProductRecord, SupplierPrice
import logging

logger = logging.getLogger(__name__)

# SQL Server error numbers for unique constraint and unique index violations
_DUPLICATE_KEY_ERRORS = ("(2627)", "(2601)")


def _rows_as_dicts(cursor) -> List[Dict[str, Any]]:
    columns = [column[0] for column in cursor.description]
    return [dict(zip(columns, row)) for row in cursor.fetchall()]


class PricelistStore:
    """Keyed reads and writes against the price list tables on one connection."""

    def __init__(self, connection):
        self.connection = connection
        self.cursor = connection.cursor()

    def find_product_id(self, code: str) -> Optional[int]:
        self.cursor.execute("SELECT Id FROM PricelistProducts WHERE Code = ?", (code,))
        row = self.cursor.fetchone()
        return row[0] if row else None

    def insert_product(self, product: ProductRecord) -> int:
        return self._insert_returning_id(
            """
            INSERT INTO PricelistProducts (Code, Article, Name, Barcode, Category)
            OUTPUT INSERTED.Id
            VALUES (?,?,?,?,?)
            """,
            (product.code, product.article, product.name, product.barcode, product.category),
        )

    def update_product(self, product_id: int, product: ProductRecord) -> None:
        self.cursor.execute(
            """
            UPDATE PricelistProducts
            SET Article = ?, Name = ?, Barcode = ?, Category = ?, UpdatedAt = SYSUTCDATETIME()
            WHERE Id = ?
            """,
            (product.article, product.name, product.barcode, product.category, product_id),
        )

    def find_price_id(self, product_id: int, supplier: str) -> Optional[int]:
        self.cursor.execute(
            "SELECT Id FROM PricelistPrices WHERE ProductId = ? AND Supplier = ?",
            (product_id, supplier),
        )
        row = self.cursor.fetchone()
        return row[0] if row else None

    def insert_price(self, product_id: int, price: SupplierPrice) -> int:
        return self._insert_returning_id(
            """
            INSERT INTO PricelistPrices (ProductId, Supplier, Price, Currency)
            OUTPUT INSERTED.Id
            VALUES (?,?,?,?)
            """,
            (product_id, price.supplier, price.price, price.currency),
        )

    def update_price(self, price_id: int, price: SupplierPrice) -> None:
        self.cursor.execute(
            """
            UPDATE PricelistPrices
            SET Price = ?, Currency = ?, UpdatedAt = SYSUTCDATETIME()
            WHERE Id = ?
            """,
            (price.price, price.currency, price_id),
        )

    def _insert_returning_id(self, query: str, params: tuple) -> int:
        try:
            self.cursor.execute(query, params)
        except Exception as e:
            if any(code in str(e) for code in _DUPLICATE_KEY_ERRORS):
                raise DuplicateKeyError(str(e)) from e
            raise
        return int(self.cursor.fetchone()[0])


class DatabaseService:
    def __init__(self):
        self.db_manager = db_manager

    def ensure_configured(self) -> None:
        self.db_manager.ensure_configured()

    def test_connection(self) -> bool:
        return self.db_manager.test_connection()

    @contextmanager
    def open_store(self) -> Generator[PricelistStore, None, None]:
        """Open a store session; every statement commits on its own."""
        with self.db_manager.get_connection(autocommit=True) as conn:
            yield PricelistStore(conn)

    def fetch_product_price_rows(self, search: Optional[str] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Fetch products joined with their prices, one row per product/supplier pair"""
        try:
            with self.db_manager.get_connection() as conn:
                cursor = conn.cursor()
                where = ""
                params: List[Any] = []
                if search and search.strip():
                    term = f"%{search.strip().lower()}%"
                    where = "WHERE LOWER(Name) LIKE ? OR LOWER(Code) LIKE ? OR LOWER(Article) LIKE ?"
                    params = [term, term, term]
                top = f"TOP({int(limit)}) " if limit is not None else ""
                order = "ORDER BY Name, Id" if limit is not None else ""
                query = f"""
                    WITH Selected AS (
                        SELECT {top}Id, Code, Article, Name, Barcode, Category
                        FROM PricelistProducts {where} {order}
                    )
                    SELECT s.Id, s.Code, s.Article, s.Name, s.Barcode, s.Category, pr.Supplier, pr.Price
                    FROM Selected s
                    LEFT JOIN PricelistPrices pr ON pr.ProductId = s.Id
                    ORDER BY s.Name, s.Id
                """
                cursor.execute(query, params)
                rows = _rows_as_dicts(cursor)
                logger.info(f"Fetched {len(rows)} product/price rows from database")
                return rows
        except Exception as e:
            logger.error(f"Error fetching products: {str(e)}")
            raise

    def fetch_prices(self, product_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """Fetch price rows, optionally for a single product"""
        try:
            with self.db_manager.get_connection() as conn:
                cursor = conn.cursor()
                if product_id is not None:
                    cursor.execute(
                        "SELECT Id, ProductId, Supplier, Price, Currency FROM PricelistPrices "
                        "WHERE ProductId = ? ORDER BY Supplier",
                        (product_id,),
                    )
                else:
                    cursor.execute(
                        "SELECT Id, ProductId, Supplier, Price, Currency FROM PricelistPrices "
                        "ORDER BY ProductId, Supplier"
                    )
                prices = _rows_as_dicts(cursor)
                logger.info(f"Fetched {len(prices)} prices from database")
                return prices
        except Exception as e:
            logger.error(f"Error fetching prices: {str(e)}")
            raise

    def fetch_product_totals(self) -> Dict[str, Any]:
        try:
            with self.db_manager.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT COUNT(*) AS TotalProducts, COUNT(DISTINCT Category) AS TotalCategories "
                    "FROM PricelistProducts"
                )
                return _rows_as_dicts(cursor)[0]
        except Exception as e:
            logger.error(f"Error fetching product totals: {str(e)}")
            raise

    def fetch_price_totals(self) -> Dict[str, Any]:
        try:
            with self.db_manager.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT COUNT(*) AS TotalPrices, COUNT(DISTINCT Supplier) AS TotalSuppliers, MIN(Price) AS MinPrice, "
                    "MAX(Price) AS MaxPrice, AVG(Price) AS AvgPrice FROM PricelistPrices"
                )
                return _rows_as_dicts(cursor)[0]
        except Exception as e:
            logger.error(f"Error fetching price totals: {str(e)}")
            raise

    def fetch_suppliers(self) -> List[str]:
        try:
            with self.db_manager.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT DISTINCT Supplier FROM PricelistPrices WHERE Supplier IS NOT NULL ORDER BY Supplier"
                )
                return [row[0] for row in cursor.fetchall()]
        except Exception as e:
            logger.error(f"Error fetching suppliers: {str(e)}")
            raise


database_service = DatabaseService()
