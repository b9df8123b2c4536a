from django.urls import path

from .views import (
    AccountingNoteWebhookView,
    ApiKeyTicketWebhookView,
    DeliveryOrderWebhookView,
    TicketWebhookView,
)

app_name = "webhooks"

urlpatterns = [
    path("ticket/", TicketWebhookView.as_view(), name="ticket"),
    path("delivery-order/", DeliveryOrderWebhookView.as_view(), name="delivery-order"),
    path("accounting-note/", AccountingNoteWebhookView.as_view(), name="accounting-note"),
    path("tickets/", ApiKeyTicketWebhookView.as_view(), name="tickets"),
]
