"""Feature modules (vertical slices: model, repository, service, router)."""
