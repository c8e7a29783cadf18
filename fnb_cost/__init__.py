"""fnb-cost.

Backend for multi-property food and beverage (F&B) cost management.

High-level architecture
-----------------------

The codebase is organized in three layers:

- **Persistence**: SQLModel entities and async repositories for users,
  properties, outlets, categories, cost entries, daily financial summaries,
  property access grants, audit logs and security events.
- **Services**: business rules such as cost entry totals, daily summary
  recalculation, audit logging, permission checks and reporting.
- **HTTP API**: FastAPI routers that expose the services under ``/api/v1``.

Core subpackages
----------------

- ``fnb_cost.core``:

  - Logging and monitoring configuration.
  - Database entities, repositories and session management.
  - Role and permission matrix, request/response schemas.
  - Pure analytics helpers (forecasting, threat detection, behavioral risk).

- ``fnb_cost.server``:

  - FastAPI application, configuration, exception handlers and middleware.
  - Service layer and API routers.

Typical workflow
----------------

1. A manager records the day's revenue and budget in a daily summary.
2. Staff enter food and beverage cost entries per outlet.
3. Each cost entry change recalculates the summary's actual cost, cost
   percentage and variance against budget.
4. Reports aggregate summaries into P&L, budget-vs-actual and forecasts.
5. Every mutation is recorded in the audit log, which feeds the security views.
"""
