"""Staff authentication and user management API."""
