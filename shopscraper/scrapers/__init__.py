"""Upstream catalog scrapers.

Contains the Billa REST and Foodora GraphQL clients, their product
mappers and the fetch loops persisting products into the catalog.
"""
