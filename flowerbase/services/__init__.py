"""External services and domain logic behind the routes."""
