"""
Service interfaces for dependency inversion.
Collaborators outside the core are reached only through these.
"""

from .image_upload import ImageUploader, attach_uploaded_image

__all__ = ['ImageUploader', 'attach_uploaded_image']
