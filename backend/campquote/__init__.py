"""Camp booking price and availability resolution engine."""
