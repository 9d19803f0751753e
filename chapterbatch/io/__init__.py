"""Input/output components for chapterbatch.

This package contains manifest reading, no-clobber artifact publishing, and the
batch summary store.
"""

from .publish import publish_if_absent
from .storage import ArtifactStore
from .work_list import WorkList, classify_manifest_line

__all__ = ["ArtifactStore", "WorkList", "classify_manifest_line", "publish_if_absent"]
