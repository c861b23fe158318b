"""Settings, lifespan, dependencies and the CORS policy."""
