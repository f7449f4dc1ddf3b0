"""Folder hierarchy walks for tree-shaped resources.

The resource graph is only reachable through two injected capabilities:
listing a folder's child folders and looking up a resource's parents. Both
walks use an explicit worklist plus a visited set, so deep or cyclic graphs
neither recurse nor loop.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable

logger = logging.getLogger(__name__)

ListChildFolders = Callable[[str], Awaitable[list[str]]]
GetParents = Callable[[str], Awaitable[list[str]]]


class FolderHierarchy:
    """Resolves ancestry questions over a folder graph."""

    def __init__(self, list_child_folders: ListChildFolders, get_parents: GetParents):
        """Initialize with the graph capabilities.

        Args:
            list_child_folders: Returns the ids of a folder's child folders
            get_parents: Returns the parent ids of any resource
        """
        self._list_child_folders = list_child_folders
        self._get_parents = get_parents

    async def get_all_subfolder_ids(self, root_id: str) -> set[str]:
        """Collect every folder below ``root_id``.

        A folder already expanded is never expanded again, but it is still
        reported when first seen as the child of another folder. With a cycle
        root -> a -> b -> root the result is {a, b, root}.

        Args:
            root_id: Folder to start from

        Returns:
            Ids of all descendant folders
        """
        result: set[str] = set()
        visited: set[str] = set()
        stack = [root_id]

        while stack:
            folder_id = stack.pop()
            if folder_id in visited:
                continue
            visited.add(folder_id)

            for child_id in await self._list_child_folders(folder_id):
                if not child_id:
                    continue
                result.add(child_id)
                if child_id not in visited:
                    stack.append(child_id)

        return result

    async def is_descendant_of_any(
        self,
        parent_ids: Iterable[str],
        allowed_root_ids: Iterable[str],
    ) -> bool:
        """Check whether any ancestor chain from ``parent_ids`` reaches an allowed root.

        A parent lookup that fails is a dead end for that branch only.

        Args:
            parent_ids: Direct parents of the resource being checked
            allowed_root_ids: Folders whose subtrees are allowed

        Returns:
            True as soon as an allowed root is found, False if none is reachable
        """
        allowed = set(allowed_root_ids)
        if not allowed:
            return False

        visited: set[str] = set()
        stack = list(parent_ids)

        while stack:
            folder_id = stack.pop()
            if folder_id in visited:
                continue
            visited.add(folder_id)

            if folder_id in allowed:
                return True

            try:
                grandparents = await self._get_parents(folder_id)
            except Exception as e:
                logger.debug(f"Parent lookup failed for {folder_id}: {e}")
                continue

            stack.extend(p for p in grandparents if p and p not in visited)

        return False
