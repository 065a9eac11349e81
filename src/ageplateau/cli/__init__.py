"""Command-line interface for ageplateau."""
