"""
Root conftest.py for the booking/storefront end-to-end harness.

Loads the harness pytest plugin so unit tests and live scenarios share the
same markers, fixtures and project ordering. pytester drives inner sessions
in the plugin tests.
"""

pytest_plugins = ["e2e_harness.pytest_plugin", "pytester"]
