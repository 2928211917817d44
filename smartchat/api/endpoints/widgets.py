"""
Widget endpoints for the signed-in user.
"""
import logging

from fastapi import APIRouter, Depends

from smartchat.core.deps import get_current_identity, get_widget_repository
from smartchat.core.errors import UpstreamError
from smartchat.core.session import CallerIdentity
from smartchat.repositories.repositories import WidgetRepository
from smartchat.schemas.schemas import WidgetSummary

log = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["Widgets"])


@router.get("/widgets", response_model=list[WidgetSummary])
async def list_my_widgets(
    identity: CallerIdentity = Depends(get_current_identity),
    repo: WidgetRepository = Depends(get_widget_repository),
):
    """Widgets owned by the caller, newest first. Empty list when none."""
    try:
        rows = await repo.list_for_owner(identity.id)
    except Exception as e:
        log.error(f"[Widgets] Failed to fetch widgets for {identity.id}: {e}", exc_info=True)
        raise UpstreamError("Failed to fetch widgets")
    return [WidgetSummary.model_validate(row) for row in rows]
