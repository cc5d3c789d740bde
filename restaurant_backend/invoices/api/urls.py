# invoices/api/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from invoices.api.viewsets import InvoiceViewSet

# mounted at /api/invoices/; SimpleRouter so the list route is not shadowed by an API root view
router = SimpleRouter()
router.register("", InvoiceViewSet, basename="invoice")

urlpatterns = [
    path("", include(router.urls)),
]
