"""
Infrastructure layer: SQLAlchemy persistence and event handlers.
"""
