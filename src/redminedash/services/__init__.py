from redminedash.services.filters import apply_filters, derive_options, filter_summary, matches

__all__ = ["apply_filters", "derive_options", "filter_summary", "matches"]
