from blog_builder.storage.base import StorageBackend
from blog_builder.storage.local import LocalBackend
from blog_builder.storage.manifest import ManifestStorage
from blog_builder.storage.memory import MockStorage
from blog_builder.storage.site_writer import SiteWriter

__all__ = [
    "StorageBackend",
    "LocalBackend",
    "MockStorage",
    "ManifestStorage",
    "SiteWriter",
]
