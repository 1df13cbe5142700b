"""Note business logic: color normalizer, ordering policy, state manager."""
