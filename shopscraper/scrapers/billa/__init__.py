"""Billa REST catalog scraper."""
