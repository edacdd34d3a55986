"""
                        Services Module

Business logic behind the HTTP routes and scheduled jobs.

Services:
    - order_store: async persistence of orders
    - ingestion: normalize, validate and store incoming orders
    - aggregation: completed-order totals
    - daily_window: reference-timezone day boundaries
    - notifications: operator SMS (mock in development, Twilio otherwise)
"""
