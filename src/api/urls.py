"""Main API URL router for /api/v1/."""
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from api.auth_views import CookieTokenObtainPairView, CookieTokenRefreshView, LogoutAPIView
from api.v1 import ledger_views
from api.v1 import views as v1_views

router = DefaultRouter()
router.register(r"sets", v1_views.SalesSetViewSet, basename="set")
router.register(r"clients", v1_views.ClientViewSet, basename="client")
router.register(r"notifications", v1_views.NotificationViewSet, basename="notification")
router.register(r"payments", ledger_views.PaymentViewSet, basename="payment")
router.register(r"commissions", ledger_views.CommissionViewSet, basename="commission")
router.register(r"salary-payments", ledger_views.SalaryPaymentViewSet, basename="salary-payment")
router.register(r"expenses", ledger_views.ExpenseViewSet, basename="expense")
router.register(r"ad-spend", ledger_views.AdSpendViewSet, basename="ad-spend")
router.register(r"manual-transactions", ledger_views.ManualTransactionViewSet, basename="manual-transaction")


app_name = "api"
urlpatterns = [
    path("", include(router.urls)),

    # Auth
    path("auth/token/", CookieTokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("auth/token/refresh/", CookieTokenRefreshView.as_view(), name="token_refresh"),
    path("auth/logout/", LogoutAPIView.as_view(), name="auth-logout"),
    path("auth/me/", v1_views.MeView.as_view(), name="auth-me"),

    # Ledger
    path("ledger/summary/", ledger_views.LedgerSummaryAPIView.as_view(), name="ledger-summary"),
    path("ledger/summary/export/", ledger_views.LedgerSummaryExportAPIView.as_view(), name="ledger-summary-export"),
]
