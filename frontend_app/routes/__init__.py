"""HTML view blueprints of the frontend."""
