"""
This orm module connects the insertion planner to SQL databases through SQLAlchemy.
It contains the schema factory, persistence stores, Unit of Work patterns and
database connection utilities.
"""
