"""
PATH: pos/urls.py

POS URLS

- Draft save + table state
- Order read / cancel
- Invoice issuance (camelCase aliases kept for older POS screens)
"""

from django.urls import path

from pos.views.api import (
    CancelOrderView,
    IssueInvoiceView,
    OrderDetailView,
    SaveDraftView,
    TableStateView,
)

app_name = "pos"

urlpatterns = [
    path("save-draft/", SaveDraftView.as_view(), name="save-draft"),
    path("saveDraft/", SaveDraftView.as_view(), name="save-draft-legacy"),

    path("table-state/", TableStateView.as_view(), name="table-state"),

    path("orders/<int:order_id>/", OrderDetailView.as_view(), name="order-detail"),
    path("orders/<int:order_id>/cancel/", CancelOrderView.as_view(), name="order-cancel"),

    path("issue-invoice/", IssueInvoiceView.as_view(), name="issue-invoice"),
    path("issueInvoice/", IssueInvoiceView.as_view(), name="issue-invoice-legacy"),
]
