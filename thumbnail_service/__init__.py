"""
Assistant thumbnail service.

Serves ``GET /assistant/{assistant_id}/thumbnail.png``: a 1200x648 PNG card
built from the assistant's metadata and avatar.
"""
