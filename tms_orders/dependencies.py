from fastapi import Depends
from tms_orders.core.tenant_context import get_content_token
from tms_orders.services.content_api import ContentApiClient


async def get_content_client(token: str = Depends(get_content_token)) -> ContentApiClient:
    """
    Content API client acting on behalf of the caller.

    Every entity write is authorized with the caller's own token.
    """
    return ContentApiClient(token=token)
