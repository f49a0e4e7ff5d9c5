"""Grocery catalog scraper and read API."""
