"""
RestBridge Auth Inheritance

Works out the auth a request actually uses when it is set to inherit.

Lookup checks the folder that directly holds the request, then the
collection. A folder set to none or inherit passes straight to the
collection; grandparent folders are never consulted.
"""

from typing import List, Optional

from ..models import (
    ApiRequest,
    Collection,
    InheritAuth,
    NoAuth,
    RequestAuth,
    RequestFolder,
    is_concrete_auth,
)


def find_folder_chain(folders: List[RequestFolder], folder_id: str) -> Optional[List[RequestFolder]]:
    """
    Locate a folder by id anywhere in the tree.

    Returns:
        Folders from the top level down to the match, or None if not found
    """
    for folder in folders:
        if folder.id == folder_id:
            return [folder]
        chain = find_folder_chain(folder.folders, folder_id)
        if chain is not None:
            return [folder] + chain
    return None


def find_request_folder_id(collection: Collection, request_id: str) -> Optional[str]:
    """Return the id of the folder directly containing a request, or None at the root."""

    def search(folders: List[RequestFolder]) -> Optional[str]:
        for folder in folders:
            if any(r.id == request_id for r in folder.requests):
                return folder.id
            found = search(folder.folders)
            if found is not None:
                return found
        return None

    return search(collection.folders)


def find_inherited_auth(collection: Optional[Collection], folder_id: Optional[str] = None) -> Optional[RequestAuth]:
    """
    Find the auth a request in the given folder inherits.

    Args:
        collection: Owning collection
        folder_id: Folder holding the request, None for the collection root

    Returns:
        The folder's basic/bearer/api-key auth, else the collection's, or None
    """
    if collection is None:
        return None

    if folder_id:
        chain = find_folder_chain(collection.folders, folder_id)
        if chain and is_concrete_auth(chain[-1].auth):
            return chain[-1].auth

    if is_concrete_auth(collection.auth):
        return collection.auth

    return None


def resolve_effective_auth(
    request: ApiRequest,
    collection: Optional[Collection] = None,
    folder_id: Optional[str] = None
) -> RequestAuth:
    """
    Return the auth to apply to a request.

    A request's own auth wins unless it is set to inherit; an inherit with
    nothing to inherit resolves to NoAuth.
    """
    if not isinstance(request.auth, InheritAuth):
        return request.auth

    if collection is not None and folder_id is None:
        folder_id = find_request_folder_id(collection, request.id)

    return find_inherited_auth(collection, folder_id) or NoAuth()


def apply_inherited_auth(auth: RequestAuth, inherited_auth: Optional[RequestAuth]) -> RequestAuth:
    """Swap an inherit marker for an already looked-up inherited auth."""
    if isinstance(auth, InheritAuth):
        return inherited_auth if is_concrete_auth(inherited_auth) else NoAuth()
    return auth
