import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from requests import RequestException

from agentgift.api.deps import require_admin
from agentgift.core.rate_limit import RATE_LIMITS, limiter
from agentgift.modules.users.models import User
from .webhooks import DiscordWebhookClient, WebhookDeliveryError, WebhookNotConfigured, get_discord_client


logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])


@router.post("/discord-webhook")
@limiter.limit(RATE_LIMITS["admin"])
def forward_to_discord(
    request: Request,
    payload: Annotated[dict[str, Any], Body()],
    _: Annotated[User, Depends(require_admin)],
    client: Annotated[DiscordWebhookClient, Depends(get_discord_client)],
):
    try:
        client.send(payload)
    except WebhookNotConfigured as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except WebhookDeliveryError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.body})
    except RequestException as e:
        logger.exception("Discord webhook request failed")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return {"success": True}
