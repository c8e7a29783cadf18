"""
Pure analytics used by the reporting and security services.

Modules:
- forecasting: Linear trend, weekly seasonality and forecast bands
- threat_detection: Rule-based threats, alerts and dashboard metrics
- behavioral: Per-user risk factors and risk score
- audit_formatting: Human-readable rendering of audit details for export
"""
