"""
AWS Lambda Handlers Module.

This module contains the Lambda handler for the products REST API and the
utilities it shares with the other layers (observability, errors, resolver,
environment configuration).
"""
