from fastapi import APIRouter

from stockalert.api.dependencies import SettingsDep
from stockalert.api.views import render

router = APIRouter(tags=["push"])


@router.get("/subscribe")
async def subscribe_page(app_settings: SettingsDep):
    """Opt-in page that registers this device with OneSignal web push."""
    return render("subscribe.html", app_id=app_settings.ONESIGNAL_APP_ID)
