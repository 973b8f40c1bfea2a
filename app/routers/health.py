"""
Health Check Router
Simple health check endpoint
"""
import logging

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter

from app.core.config import settings, verify_settings
from app.db import dynamo
from app.models.expense import utc_now_iso

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check():
    """
    Health check endpoint.
    Returns API status.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "timestamp": utc_now_iso(),
    }


@router.get("/status")
def services_status():
    """
    Check connectivity of the DynamoDB tables and report configuration gaps.
    """
    tables = {
        "users": (dynamo.users_table, settings.DYNAMO_USERS_TABLE),
        "expenses": (dynamo.expenses_table, settings.DYNAMO_EXPENSES_TABLE),
        "profiles": (dynamo.profiles_table, settings.DYNAMO_PROFILES_TABLE),
    }

    dynamodb_status = {"connected": False, "region": settings.DYNAMO_REGION, "tables": {}}
    for label, (table, name) in tables.items():
        try:
            table.scan(Limit=1)
            dynamodb_status["tables"][label] = {"name": name, "status": "accessible"}
        except (ClientError, BotoCoreError) as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown") if isinstance(e, ClientError) else type(e).__name__
            logger.error(f"DynamoDB check failed for {name}: {str(e)}")
            dynamodb_status["tables"][label] = {"name": name, "status": "error", "error": error_code}

    dynamodb_status["connected"] = all(
        table["status"] == "accessible" for table in dynamodb_status["tables"].values()
    )

    configuration_problems = verify_settings(settings)
    gemini_status = {"configured": bool(settings.GEMINI_API_KEY), "model": settings.GEMINI_MODEL}

    healthy = dynamodb_status["connected"] and gemini_status["configured"]
    return {
        "timestamp": utc_now_iso(),
        "services": {"dynamodb": dynamodb_status, "gemini": gemini_status},
        "configuration_problems": configuration_problems,
        "overall_status": "healthy" if healthy else "degraded",
    }
