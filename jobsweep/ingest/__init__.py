"""Scraping layer: browser sessions, rate limiting, retries, adapters and source selection."""
