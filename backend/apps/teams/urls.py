"""
URL configuration for teams app.
"""

from django.urls import path

from . import dashboard, views

app_name = "teams"

urlpatterns = [
    # Teams
    path('teams/', views.TeamListCreateView.as_view(), name='team-list'),
    path('teams/<slug:slug>/', views.TeamDetailView.as_view(), name='team-detail'),
    path('teams/<slug:slug>/change/', views.TeamSwitchView.as_view(), name='team-change'),

    # Staff dashboard
    path('dashboard/teams/', dashboard.DashboardTeamListView.as_view(), name='dashboard-team-list'),
    path('dashboard/teams/search/', dashboard.DashboardTeamSearchView.as_view(), name='dashboard-team-search'),
    path('dashboard/teams/<int:pk>/', dashboard.DashboardTeamDetailView.as_view(), name='dashboard-team-detail'),
]
