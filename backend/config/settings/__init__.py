"""
Settings package for TeamPay.

- base.py: shared settings
- local.py: development machine
- test.py: test suite
- production.py: server

Select one with DJANGO_SETTINGS_MODULE and read values through
django.conf.settings.
"""
