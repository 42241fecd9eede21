"""HTTP surface: routes, request/response models, dependencies and middleware."""
