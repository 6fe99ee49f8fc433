from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Tuple


class SupplierPrice(BaseModel):
    supplier: str
    price: Optional[Decimal] = None
    currency: Optional[str] = None


class ProductRecord(BaseModel):
    code: str = Field(..., min_length=1)
    article: Optional[str] = None
    name: str
    barcode: Optional[str] = None
    category: Optional[str] = None
    prices: List[SupplierPrice] = []


class ImportStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    products_processed: int = 0
    products_inserted: int = 0
    products_updated: int = 0
    prices_inserted: int = 0
    prices_updated: int = 0
    categories_found: int = 0
    errors: Tuple[str, ...] = ()


class ImportOutcome(BaseModel):
    stats: ImportStats
    status: str
    duration: float
    filename: Optional[str] = None
    file_size: int = 0


class ImportResponse(BaseModel):
    success: bool
    stats: Optional[ImportStats] = None
    error: Optional[str] = None
    details: Optional[str] = None
    status: Optional[str] = None
    duration: Optional[float] = None
    filename: Optional[str] = None
    file_size: Optional[int] = None


class PriceRow(BaseModel):
    id: int
    product_id: int
    supplier: str
    price: Optional[float] = None
    currency: Optional[str] = None


class ProductWithPrices(BaseModel):
    id: int
    code: str
    article: Optional[str] = None
    name: str
    barcode: Optional[str] = None
    category: Optional[str] = None
    supplier_prices: Dict[str, Optional[float]] = {}
    lowest_price: Optional[float] = None
    highest_price: Optional[float] = None


class PriceRange(BaseModel):
    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0


class PricelistOverview(BaseModel):
    total_products: int
    total_prices: int
    total_suppliers: int
    total_categories: int
    price_range: PriceRange
