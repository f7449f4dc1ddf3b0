"""Google Docs allowlist permissions.

Access is granted per document (``allowedDocuments``) or per folder
(``allowedFolders``, including nested subfolders). When no ``docs`` section
is configured the domain is unrestricted: every check allows.
"""

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..utils.fanout import gather_settled
from .config_loader import load_config
from .decision import AccessDecision
from .hierarchy import FolderHierarchy

logger = logging.getLogger(__name__)


class DocumentEntry(BaseModel):
    """A single allowlisted document."""

    id: str
    name: str = ""


class FolderEntry(BaseModel):
    """An allowlisted folder; its whole subtree is allowed."""

    id: str
    name: str = ""


class PermissionConfig(BaseModel):
    """Docs allowlist."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    allowed_documents: list[DocumentEntry] = Field(default_factory=list, alias="allowedDocuments")
    allowed_folders: list[FolderEntry] = Field(default_factory=list, alias="allowedFolders")

    @property
    def allowed_folder_ids(self) -> set[str]:
        return {folder.id for folder in self.allowed_folders}


def load_permission_config(config_path: Path | None) -> PermissionConfig | None:
    """Load the docs allowlist.

    Returns:
        The allowlist, or None (unrestricted) when the file, the section, or
        its contents are unusable
    """
    section = load_config(config_path, "docs")
    if section is None:
        return None
    try:
        return PermissionConfig.model_validate(section)
    except ValidationError as e:
        logger.error(f"Invalid 'docs' policy section ({e}); docs access is unrestricted")
        return None


def check_document_access(config: PermissionConfig | None, file_id: str) -> AccessDecision:
    """Check whether a document is allowlisted directly."""
    # No allowlist configured: everything is accessible
    if config is None:
        return AccessDecision.allow()

    if any(entry.id == file_id for entry in config.allowed_documents):
        return AccessDecision.allow()

    return AccessDecision.deny(
        f"Document ({file_id}) is not in the allowlist. Add it to allowedDocuments, "
        "or use a document inside a folder listed in allowedFolders."
    )


def check_folder_access(config: PermissionConfig | None, folder_id: str) -> AccessDecision:
    """Check whether a folder is allowlisted."""
    if config is None:
        return AccessDecision.allow()

    if folder_id in config.allowed_folder_ids:
        return AccessDecision.allow()

    return AccessDecision.deny(
        f"Folder ({folder_id}) is not in the allowlist. Add it to allowedFolders."
    )


def is_file_in_allowed_folder(config: PermissionConfig | None, parent_ids: list[str]) -> bool:
    """Check whether any direct parent is an allowlisted folder."""
    if config is None:
        return True
    allowed = config.allowed_folder_ids
    return any(parent_id in allowed for parent_id in parent_ids)


async def is_descendant_of_allowed_folder(
    hierarchy: FolderHierarchy,
    config: PermissionConfig | None,
    parent_ids: list[str],
) -> bool:
    """Check whether the parents lead, at any depth, to an allowlisted folder."""
    if config is None:
        return True
    return await hierarchy.is_descendant_of_any(parent_ids, config.allowed_folder_ids)


async def check_document_in_tree(
    config: PermissionConfig | None,
    hierarchy: FolderHierarchy,
    file_id: str,
    parent_ids: list[str],
) -> AccessDecision:
    """Check a document against both the document and the folder allowlists.

    Args:
        config: Docs allowlist, or None when unrestricted
        hierarchy: Folder graph used to resolve nested folders
        file_id: Document being accessed
        parent_ids: The document's direct parents

    Returns:
        Allow when the document is listed or lives under an allowed folder
    """
    direct = check_document_access(config, file_id)
    if direct.allowed:
        return direct

    if await is_descendant_of_allowed_folder(hierarchy, config, parent_ids):
        return AccessDecision.allow()

    return direct


async def allowed_folder_scope(
    config: PermissionConfig | None,
    hierarchy: FolderHierarchy,
) -> set[str] | None:
    """Expand the folder allowlist to every nested subfolder.

    Allowed folders are expanded concurrently. A folder whose listing fails
    contributes only its own id.

    Returns:
        All searchable folder ids, or None when docs access is unrestricted
    """
    if config is None:
        return None

    subtrees = await gather_settled(
        [hierarchy.get_all_subfolder_ids(folder.id) for folder in config.allowed_folders],
        lambda exc: set(),
    )
    scope = set(config.allowed_folder_ids)
    for subfolder_ids in subtrees:
        scope |= subfolder_ids
    return scope
