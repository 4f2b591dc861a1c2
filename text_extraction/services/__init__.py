"""Service layer: Document Intelligence backend, orchestration and metrics."""
