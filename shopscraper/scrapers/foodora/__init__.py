"""Foodora GraphQL catalog scraper."""
