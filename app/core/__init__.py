"""Configuration, logging and error primitives shared by the service."""
