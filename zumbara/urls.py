from django.urls import path, include
from django.conf import settings
from django.conf.urls.i18n import i18n_patterns

# Language switcher (no prefix)
urlpatterns = [
    path('i18n/', include('django.conf.urls.i18n')),
]

# Storefront + back office (with language prefixes)
urlpatterns += i18n_patterns(
    path('', include('store.urls')),
)

if settings.DEBUG:
    urlpatterns += [
        path("__reload__/", include("django_browser_reload.urls")),
    ]
