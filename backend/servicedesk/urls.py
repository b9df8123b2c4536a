from django.urls import path

from .views import DeliveryOrderListView, TicketListCreateView

app_name = "servicedesk"

urlpatterns = [
    path("tickets/", TicketListCreateView.as_view(), name="ticket-list-create"),
    path("delivery-orders/", DeliveryOrderListView.as_view(), name="delivery-order-list"),
]
