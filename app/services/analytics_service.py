import logging
from typing import Any, Dict, List, Optional

from app.models.pricelist import PriceRange, PriceRow, PricelistOverview, ProductWithPrices

logger = logging.getLogger(__name__)


def _to_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


class AnalyticsService:
    def group_products(self, rows: List[Dict[str, Any]]) -> List[ProductWithPrices]:
        """Fold product/price join rows into one entry per product, keeping row order"""
        products: Dict[int, ProductWithPrices] = {}
        for row in rows:
            product_id = row.get('Id')
            current = products.get(product_id)
            if current is None:
                current = ProductWithPrices(
                    id=product_id,
                    code=row.get('Code'),
                    article=row.get('Article'),
                    name=row.get('Name'),
                    barcode=row.get('Barcode'),
                    category=row.get('Category'),
                )
                products[product_id] = current

            supplier = row.get('Supplier')
            if supplier:
                current.supplier_prices[supplier] = _to_float(row.get('Price'))

        for product in products.values():
            known = [p for p in product.supplier_prices.values() if p is not None]
            if known:
                product.lowest_price = min(known)
                product.highest_price = max(known)

        logger.info(f"Grouped {len(rows)} rows into {len(products)} products")
        return list(products.values())

    def build_overview(self, product_totals: Dict[str, Any], price_totals: Dict[str, Any]) -> PricelistOverview:
        return PricelistOverview(
            total_products=int(product_totals.get('TotalProducts') or 0),
            total_prices=int(price_totals.get('TotalPrices') or 0),
            total_suppliers=int(price_totals.get('TotalSuppliers') or 0),
            total_categories=int(product_totals.get('TotalCategories') or 0),
            price_range=PriceRange(
                min=_to_float(price_totals.get('MinPrice')) or 0.0,
                max=_to_float(price_totals.get('MaxPrice')) or 0.0,
                avg=_to_float(price_totals.get('AvgPrice')) or 0.0,
            ),
        )

    def to_price_rows(self, rows: List[Dict[str, Any]]) -> List[PriceRow]:
        return [
            PriceRow(
                id=row['Id'],
                product_id=row['ProductId'],
                supplier=row['Supplier'],
                price=_to_float(row.get('Price')),
                currency=row.get('Currency'),
            )
            for row in rows
        ]


analytics_service = AnalyticsService()
