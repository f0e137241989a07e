"""iReporter citizen-reporting backend."""
