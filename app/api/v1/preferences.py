from fastapi import APIRouter, Depends

from app.api.deps import AuthSession, require_role
from app.schemas.preferences import ViewSettings
from app.services.view_settings import (
    ViewSettingsStore,
    get_view_settings_store,
    load_view_settings,
)

router = APIRouter()


@router.get("/view", response_model=ViewSettings)
async def read_view_settings(
    session: AuthSession = Depends(require_role),
    store: ViewSettingsStore = Depends(get_view_settings_store),
):
    """
    The caller's ticket card settings. Users who never saved any get the
    defaults.
    """
    return await load_view_settings(store, session.user_id)


@router.put("/view", response_model=ViewSettings)
async def save_view_settings(
    data: ViewSettings,
    session: AuthSession = Depends(require_role),
    store: ViewSettingsStore = Depends(get_view_settings_store),
):
    await store.save(session.user_id, data)
    return data
