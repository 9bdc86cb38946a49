"""Core building blocks shared by features and infrastructure."""
