"""Flask JSON API for roll polar data."""
