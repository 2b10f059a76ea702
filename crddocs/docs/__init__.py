"""Documentation output: annotation collection and page rendering."""

from crddocs.docs.annotations import collect_annotations
from crddocs.docs.output import write_page

__all__ = ["collect_annotations", "write_page"]
