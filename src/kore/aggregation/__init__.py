"""Aggregation module for trading statistics.

- stats: headline KPIs (win rate, profit factor, streaks)
- performance: equity curve, calendar, per-group breakdowns
- summary: loads trades via repo and runs the pure aggregators
"""
