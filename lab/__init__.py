"""Laboratory application for the LabDesk backend.

This package holds the models, services, print formatter, auto-save
reconciler and route registrations that make up the laboratory API.
"""
