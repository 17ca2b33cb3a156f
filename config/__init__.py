"""YAML configuration with environment overrides (see config/loader.py)."""
