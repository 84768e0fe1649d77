"""Browser-based console for SysCall Secure.

This package provides a Flask application that puts a login form,
syscall forms, the audit log, and a file browser in front of one
kernel.  It is an **optional** extra — install with::

    pip install syscall-secure[web]

See ``app.create_app`` for the endpoints.
"""
