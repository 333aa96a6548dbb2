"""
URL configuration for users app.
"""

from django.urls import path

from . import views

app_name = "users"

urlpatterns = [
    # Authentication endpoints
    path('auth/register/', views.RegisterView.as_view(), name='register'),
    path('auth/login/', views.LoginView.as_view(), name='login'),
    path('auth/refresh/', views.TokenRefreshView.as_view(), name='refresh'),
    path('auth/logout/', views.LogoutView.as_view(), name='logout'),

    # Account endpoints
    path('account/', views.AccountView.as_view(), name='account'),
    path('account/password/', views.PasswordUpdateView.as_view(), name='password'),
]
