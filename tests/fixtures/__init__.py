"""
Shared test fixtures for the Docker Stats Exporter tests.

- docker_stats: builders for Docker stats payloads and mocked Docker clients
"""
