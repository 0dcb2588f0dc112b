"""Pipeline services and external collaborators."""
