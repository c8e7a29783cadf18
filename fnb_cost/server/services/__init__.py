"""
Service layer for the fnb-cost server.

Services hold the business rules behind the HTTP API: permission and property
access checks, validation, derived figures and audit logging. They operate on
a ``SqlRepoBundle`` bound to the request's session and on the calling user.
"""
