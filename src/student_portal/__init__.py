"""Student Government Portal package.

This package is organized by feature modules (users, events, hours, voting, ...)
with a thin Flask controller layer over service/repository layers.
"""
