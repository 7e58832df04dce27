"""HTTP routers for the issue tracker API."""
