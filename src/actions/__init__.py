"""Task actions: the work each declared task performs."""

from .archive import PackageArchive
from .deploy import Deploy, DirectDeploy
from .docs import ServiceDocs
from .generate_service import GenerateService
from .sass import SassToCss
from .theme import BuildThumbnail, MergeTheme

__all__ = [
    "BuildThumbnail",
    "Deploy",
    "DirectDeploy",
    "GenerateService",
    "MergeTheme",
    "PackageArchive",
    "SassToCss",
    "ServiceDocs",
]
