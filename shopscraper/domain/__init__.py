"""Domain layer module.

Contains the exception hierarchy shared by scrapers, search and API.
"""
