"""Domain layer: pure funnel graph model, validation rules, and errors."""
