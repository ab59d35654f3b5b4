"""Framework integrations for the shared cache facade."""
