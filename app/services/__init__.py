"""Service layer: remote clients, durable storage and session state."""
