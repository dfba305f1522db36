from django.urls import include, path

urlpatterns = [
    path('', include('grepy.urls')),
]
