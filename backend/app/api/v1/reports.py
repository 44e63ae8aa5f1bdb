"""
Dashboard and report endpoints for KidLedger.

- GET /dashboard/stats: totalAccounts, totalBalance, monthlyNet
- GET /reports/overview: global credit/debit totals and per-account reports
"""
from fastapi import APIRouter, Depends

from backend.app.api.v1.dependencies import get_aggregation_service
from backend.app.schemas.reports import DashboardStats, ReportsOverview
from backend.app.services.aggregation_service import AggregationService

dashboard_router = APIRouter(prefix="/dashboard", tags=["Dashboard"])
reports_router = APIRouter(prefix="/reports", tags=["Reports"])


@dashboard_router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(service: AggregationService = Depends(get_aggregation_service)) -> DashboardStats:
    """Recomputed on every request from the current accounts and transactions."""
    return await service.dashboard_stats()


@reports_router.get("/overview", response_model=ReportsOverview)
async def get_reports_overview(service: AggregationService = Depends(get_aggregation_service)) -> ReportsOverview:
    return await service.reports_overview()
