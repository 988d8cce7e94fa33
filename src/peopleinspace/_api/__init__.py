"""Endpoint modules. Internal to peopleinspace and may change at any time."""
