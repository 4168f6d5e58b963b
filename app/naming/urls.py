from django.urls import path

from naming import views

app_name = 'naming'

urlpatterns = [
  # Registry record lookup (read-only)
  path('records/<str:name>/', views.record_lookup, name='record-lookup'),
]
