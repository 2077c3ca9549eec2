"""Core application for the PetMedi backend.

This package contains the models, services, serializers, views and route
registrations for hospitals, animals, billing, inventory and notifications.
"""
