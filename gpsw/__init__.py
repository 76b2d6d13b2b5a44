"""Live GPS tracker windowing engine."""
