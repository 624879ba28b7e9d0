# FILE: factory/__init__.py
"""Software-factory front end: brief -> IR compiler and SOC patch parser."""
