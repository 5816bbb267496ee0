from django.urls import path
from . import views

urlpatterns = [
    path('documents/', views.DocumentListCreateView.as_view(), name='vault-documents'),
    path('documents/<uuid:pk>/', views.DocumentDetailView.as_view(), name='vault-document-detail'),
]
