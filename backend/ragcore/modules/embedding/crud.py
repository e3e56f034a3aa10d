"""CRUD operations for widget embeddings using FastCRUD."""

from fastcrud import FastCRUD

from .models import WidgetEmbedding

widget_embedding_crud: FastCRUD = FastCRUD(WidgetEmbedding)
