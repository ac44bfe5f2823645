"""Building blocks shared by the schema layer and the adapters."""
