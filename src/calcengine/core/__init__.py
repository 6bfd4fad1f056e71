"""Core of calcengine: errors, expression tree, language pipeline, settings."""
