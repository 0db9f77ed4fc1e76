"""Remote-control client for an HTTP-controlled mobile robot."""
