"""Browse a container-image registry as a namespace/repository/tag tree."""

__version__ = "0.1.0"
