"""doccatalog – per-term course catalog scraper for frame-based course directories."""
