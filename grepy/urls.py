from django.urls import path
from . import views

urlpatterns = [
    # Regex conversions
    path('api/regex-to-nfa/', views.regex_to_nfa, name='regex_to_nfa'),
    path('api/regex-to-dfa/', views.regex_to_dfa, name='regex_to_dfa'),

    # Test strings against a regex
    path('api/simulate/', views.simulate, name='simulate'),

    # Graphviz output
    path('api/export-dot/', views.export_dot, name='export_dot'),
]
