"""Dashboard JSON endpoints over the DCM mock data."""

from django.http import JsonResponse
from django.views.decorators.http import require_GET

from .deals import recent_deals
from .investors import allocation_breakdown, allocations_for_deal
from .secondary import drift_trend, secondary_performance

DASHBOARD_DEALS = 20
DASHBOARD_ALLOCATION_DEALS = 6
DASHBOARD_SECONDARY_DEALS = 10
DASHBOARD_TREND_THRESHOLD_BPS = 3


@require_GET
def deals_view(request):
    return JsonResponse({"deals": recent_deals(DASHBOARD_DEALS)})


@require_GET
def allocations_view(request):
    rows = []
    for deal in recent_deals(DASHBOARD_ALLOCATION_DEALS):
        by_type = allocation_breakdown(allocations_for_deal(deal["id"], deal["size"]), "investorType", "type")
        top = sorted(by_type, key=lambda r: r["percentage"], reverse=True)[:3]
        rows.append({
            "dealId": deal["id"],
            "issuerName": deal["issuerName"],
            "size": deal["size"],
            "oversubscription": deal["oversubscription"],
            "topInvestorTypes": [{"type": r["type"], "percentage": r["percentage"]} for r in top],
        })
    return JsonResponse({"allocations": rows})


@require_GET
def secondary_view(request):
    rows = []
    for deal in recent_deals(DASHBOARD_SECONDARY_DEALS):
        prints = secondary_performance(deal["isin"], 30)
        current = prints[-1]["spread"] if prints else deal["spread"]
        drift = current - deal["spread"]
        rows.append({
            "isin": deal["isin"],
            "issuerName": deal["issuerName"],
            "issueSpread": deal["spread"],
            "currentSpread": current,
            "spreadDrift": drift,
            "trend": drift_trend(drift, DASHBOARD_TREND_THRESHOLD_BPS),
            "avgVolume": sum(p["volumeTraded"] for p in prints) / len(prints) if prints else 0,
        })
    return JsonResponse({"secondary": rows})
