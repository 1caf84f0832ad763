from django.urls import path
from . import views

urlpatterns = [
    path('gateway/create/', views.CreateGatewayPaymentView.as_view(), name='gateway-payment-create'),
    path('gateway/verify/', views.VerifyGatewayPaymentView.as_view(), name='gateway-payment-verify'),
    path('webhook/', views.gateway_webhook, name='gateway-webhook'),
    path('cod/', views.CODConfirmView.as_view(), name='cod-confirm'),
    path('cod/delivery-confirm/', views.CODDeliveryConfirmView.as_view(), name='cod-delivery-confirm'),
    path('cod/tracking/<int:order_id>/', views.CODTrackingView.as_view(), name='cod-tracking'),
    path('cod/pending/', views.CODPendingView.as_view(), name='cod-pending'),
    path('status/<int:order_id>/', views.PaymentStatusView.as_view(), name='payment-status'),
]
