"""HTTP gateway: app factory, routes, middleware and dependency wiring."""
