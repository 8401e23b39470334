# routes/dashboard.py

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from api_service import ApiError, MarketplaceApi
from crud import dashboard as crud_dashboard
from dependencies import get_api, require_subscription
from templating import render
from utils import get_logger

logger = get_logger("dashboard")

router = APIRouter(
    tags=["Dashboard"],
    dependencies=[Depends(require_subscription)],
)


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard_page(request: Request, api: MarketplaceApi = Depends(get_api)):
    """
    Overview cards, recent orders and alerts. Alerts are optional: a
    failure there must not take the whole page down.
    """
    stats = crud_dashboard.get_overview(api)
    try:
        alerts = crud_dashboard.get_alerts(api)
    except ApiError as e:
        logger.warning("[dashboard] alerts unavailable: %s", e)
        alerts = []
    return render(request, "dashboard.html", {"title": "Dashboard", "stats": stats, "alerts": alerts})
