"""Terminal runtime: config, raw-mode terminal control, and the key loop."""
