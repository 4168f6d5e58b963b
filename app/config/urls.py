from django.urls import include, path

urlpatterns = [
  path('naming/', include('naming.urls')),
]
