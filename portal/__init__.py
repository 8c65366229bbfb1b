"""Portal application for the SwasthyaSetu backend.

This package contains models, serializers, services, views and route
registrations implementing the REST API used by the static frontend.
"""
