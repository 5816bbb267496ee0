from django.urls import path
from . import views

urlpatterns = [
    # Shared views
    path('shared/', views.SharedDocumentsView.as_view(), name='vault-shared-documents'),
    path('shared/owners/', views.SharingOwnersView.as_view(), name='vault-sharing-owners'),

    # Invite codes
    path('invite-code/', views.InviteCodeView.as_view(), name='vault-invite-code'),
    path('invite-code/redeem/', views.RedeemInviteCodeView.as_view(), name='vault-redeem-invite'),

    # Viewers
    path('viewers/', views.ViewerListView.as_view(), name='vault-viewers'),
    path('viewers/<int:viewer_id>/', views.RevokeViewerView.as_view(), name='vault-revoke-viewer'),
]
