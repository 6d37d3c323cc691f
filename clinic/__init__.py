"""Clinic application of the medical-representative portal.

This package contains the models, serializers, services, views and
route registrations behind the JSON API used by the portal front-end:
accounts and approvals, the doctor directory, referred patients,
notifications, the AI helpers and the sterilization board.
"""
