"""Services around the grouping engine: ingestion runs, view state, export and rendering."""
