"""
Settings package for store_server.

Select an environment module through DJANGO_SETTINGS_MODULE, e.g.
``store_server.settings.development``.
"""
