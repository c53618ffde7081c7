"""SMS route. Messages are logged, not delivered."""
import logging
from datetime import datetime, timezone
from fastapi import APIRouter

from portal.schemas.attendance import SmsRequest, SmsResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sms", tags=["sms"])


@router.post("/send", response_model=SmsResponse)
async def send_sms(body: SmsRequest):
    logger.info(
        "SMS send request: %d recipient(s), sent_by=%s, type=%s, at=%s",
        len(body.recipients), body.sent_by, body.type, datetime.now(timezone.utc).isoformat(),
    )
    return {"success": True, "message": "SMS logged successfully", "count": len(body.recipients)}
