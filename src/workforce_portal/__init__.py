"""Workforce Portal package.

Multi-tenant HR backend organized by feature modules (auth, companies,
employees, onboarding, files, attendance) with a thin Flask controller layer
over service/repository layers, plus a Python client for the same API.
"""
