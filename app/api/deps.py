from fastapi import Depends
from app.services.analytics_service import analytics_service
from app.services.database_service import DatabaseService, database_service
from app.services.import_service import PricelistImportService


def get_database_service():
    """Dependency for database service"""
    return database_service


def get_analytics_service():
    """Dependency for analytics service"""
    return analytics_service


def get_import_service(db_service: DatabaseService = Depends(get_database_service)):
    """Dependency for price list import service"""
    return PricelistImportService(db_service)
