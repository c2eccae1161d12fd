"""Geo-attendance package.

Feature modules (attendance, users, remote, geo, cache) keep the domain
logic in services and adapters; the Flask controllers are a thin JSON layer
over them.
"""
