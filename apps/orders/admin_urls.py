from django.urls import path
from . import views

urlpatterns = [
    path('', views.AdminOrderListView.as_view(), name='admin-order-list'),
    path('bulk-status/', views.AdminBulkStatusView.as_view(), name='admin-order-bulk-status'),
    path('<int:order_id>/', views.AdminOrderDetailView.as_view(), name='admin-order-detail'),
    path('<int:order_id>/status/', views.AdminOrderStatusView.as_view(), name='admin-order-status'),
]
