"""Geospatial intelligence services: address resolution, routing and geofencing."""
