# Importing the package registers every table on Base.metadata
from snipshelf.models.collection import SnippetCollection
from snipshelf.models.snippet import Snippet

__all__ = ["SnippetCollection", "Snippet"]
