"""
AcadCentral Department Portal
Mirror synchronization API routes: full-state read and full-collection replace
"""

import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.connection import get_db
from ..database.repository import read_all, replace_collection
from ..database.schema import is_synced_collection
from ..exceptions import InvalidPayloadException, UnknownCollectionException

# Configure logging
logger = logging.getLogger(__name__)

# Router instance
router = APIRouter()


# Pydantic models
class SyncRequest(BaseModel):
    key: Optional[str] = None
    # Either the JSON text the client stored or the decoded list itself
    value: Any = None


class SyncResponse(BaseModel):
    ok: bool = True
    count: Optional[int] = None
    skipped: Optional[bool] = None


class SyncAllResponse(BaseModel):
    ok: bool = True
    total: int = 0


# Helper functions
def parse_sync_value(value: Any) -> Any:
    """Decode a JSON-encoded value; anything else is taken as already decoded"""
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            raise InvalidPayloadException("Invalid JSON value")
    return value


# Routes
@router.get("/data")
async def get_all_data(db: AsyncSession = Depends(get_db)) -> Dict[str, List[Dict[str, Any]]]:
    """Every mirrored collection in record shape, keyed by collection name"""
    return await read_all(db)


@router.post("/sync", response_model=SyncResponse, response_model_exclude_none=True)
async def sync_collection(
    request: SyncRequest,
    db: AsyncSession = Depends(get_db)
):
    """Replace one collection with the full list the client holds"""
    if not is_synced_collection(request.key):
        raise UnknownCollectionException(request.key)

    records = parse_sync_value(request.value)
    if not isinstance(records, list):
        return SyncResponse(ok=True, skipped=True)

    await replace_collection(db, request.key, records)
    await db.commit()

    logger.debug(f"Synced {request.key}: {len(records)} records")
    return SyncResponse(ok=True, count=len(records))


@router.post("/sync-all", response_model=SyncAllResponse)
async def sync_all_collections(
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db)
):
    """Replace every recognised collection in the payload; other keys are ignored"""
    total = 0
    for key, records in payload.items():
        if is_synced_collection(key) and isinstance(records, list):
            await replace_collection(db, key, records)
            total += len(records)

    await db.commit()

    logger.info(f"Full sync applied: {total} records")
    return SyncAllResponse(ok=True, total=total)
