"""Display services: session wiring, producer, stream and registry."""
