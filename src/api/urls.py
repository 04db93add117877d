"""Main API URL router for /api/v1/."""
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from commissions import commission_views as commission_api_views

router = DefaultRouter()
router.register(r'commission-rules', commission_api_views.CommissionRuleSetViewSet, basename='commission-rule')
router.register(r'commission-records', commission_api_views.MonthlyCommissionViewSet, basename='commission-record')


app_name = 'api'
urlpatterns = [
    path('', include(router.urls)),

    # Commission engine
    path('commissions/compute/', commission_api_views.ComputeCommissionView.as_view(), name='commission-compute'),
    path('commissions/recompute/', commission_api_views.RecomputeView.as_view(), name='commission-recompute'),
    path('commissions/leaderboard/', commission_api_views.LeaderboardView.as_view(), name='commission-leaderboard'),
    path('commissions/metrics/', commission_api_views.MetricsView.as_view(), name='commission-metrics'),
]
