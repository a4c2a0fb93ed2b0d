"""HTTP blueprints of the task API."""
