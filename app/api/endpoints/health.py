from fastapi import APIRouter, Depends
from app.core.config import settings
from app.services.database_service import DatabaseService
from app.api.deps import get_database_service

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "pricelist-import",
        "version": settings.version
    }


@router.get("/test-connections")
async def test_connections(
    db_service: DatabaseService = Depends(get_database_service)
):
    """Test database connection"""
    results = {}
    
    try:
        results['database'] = 'connected' if db_service.test_connection() else 'failed'
    except Exception as e:
        results['database'] = f'error: {str(e)}'
    
    return results
