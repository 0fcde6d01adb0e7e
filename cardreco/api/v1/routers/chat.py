# cardreco/api/v1/routers/chat.py
from fastapi import APIRouter, Depends
import time
import logging

from cardreco.api.deps import reco_context
from cardreco.api.v1.schemas.reco import ChatRequest, ChatResponse
from cardreco.domain.services.chat_svc import resolve
from cardreco.domain.services.context import RecoContext

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post("/chat", response_model=ChatResponse)
async def chat(body: ChatRequest, ctx: RecoContext = Depends(reco_context)):
    """
    Free-form question -> short answer plus matching cards.
    Explicit price ranges and card types in the message are always enforced,
    whatever the model suggested.
    """
    logger.info("Request: chat customer_id=%s, message_len=%s", body.customer_id, len(body.message))
    start_time = time.perf_counter()

    res = await resolve(ctx, body.message, customer_id=body.customer_id)

    logger.info(
        "Response: chat customer_id=%s, count=%s, elapsed_time=%.4fs",
        body.customer_id, len(res.items), time.perf_counter() - start_time,
    )
    return ChatResponse.from_domain(res)
