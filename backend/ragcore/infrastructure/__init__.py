"""Infrastructure for ragcore: settings, logging, database, embedding providers and vector indexing."""
