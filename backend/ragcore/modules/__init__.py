"""Domain modules: chunking, embedding storage, similarity search and ingestion."""
