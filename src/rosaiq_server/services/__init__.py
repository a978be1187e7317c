"""Domain services for the device sync subsystem."""
