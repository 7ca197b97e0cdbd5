"""Network-performing services: providers, catalog client, pipeline and store."""
