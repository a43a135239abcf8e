"""Provider credential propagation controller."""
