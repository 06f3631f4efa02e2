"""zipreview -- upload a zipped project, get a heuristic quality report."""
