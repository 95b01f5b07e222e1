"""ORM table mappers. Importing this package registers every table."""
from filedrop.models.client import CatalogEntryRow, StagedFileRow
from filedrop.models.server import IngestRecord

__all__ = ["CatalogEntryRow", "IngestRecord", "StagedFileRow"]
