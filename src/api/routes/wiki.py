"""Wiki content routes.

Reads are public; writes require an admin session.
"""

from typing import List

from fastapi import APIRouter, HTTPException, Response, status

from api.routes.auth import AdminUserDep
from core.dependencies import StorageDep
from schemas.wiki import NewWikiContent, WikiContent, WikiContentRequest, WikiContentUpdate

router = APIRouter(prefix="/api/wiki", tags=["Wiki"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Content not found",
    )


# Literal paths are registered before "/{content_id}" so they are not
# swallowed by it.
@router.get("/categories", response_model=List[str], summary="List wiki categories")
def list_categories(storage: StorageDep) -> List[str]:
    return storage.get_all_wiki_categories()


@router.get("/category/{category}", response_model=List[WikiContent], summary="Articles in a category")
def list_by_category(category: str, storage: StorageDep) -> List[WikiContent]:
    return storage.get_wiki_content_by_category(category)


@router.get("", response_model=List[WikiContent], summary="List wiki articles")
def list_content(storage: StorageDep) -> List[WikiContent]:
    return storage.get_all_wiki_content()


@router.get("/{content_id}", response_model=WikiContent, summary="Get a wiki article")
def get_content(content_id: int, storage: StorageDep) -> WikiContent:
    content = storage.get_wiki_content(content_id)
    if content is None:
        raise _not_found()
    return content


@router.post(
    "",
    response_model=WikiContent,
    status_code=status.HTTP_201_CREATED,
    summary="Create a wiki article",
)
def create_content(
    req: WikiContentRequest,
    storage: StorageDep,
    current_user: AdminUserDep,
) -> WikiContent:
    return storage.create_wiki_content(
        NewWikiContent(created_by=current_user.id, **req.model_dump())
    )


@router.put("/{content_id}", response_model=WikiContent, summary="Update a wiki article")
def update_content(
    content_id: int,
    req: WikiContentUpdate,
    storage: StorageDep,
    current_user: AdminUserDep,
) -> WikiContent:
    changes = req.model_dump(exclude_unset=True, exclude_none=True)
    updated = storage.update_wiki_content(content_id, changes)
    if updated is None:
        raise _not_found()
    return updated


@router.delete(
    "/{content_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a wiki article",
)
def delete_content(
    content_id: int,
    storage: StorageDep,
    current_user: AdminUserDep,
) -> Response:
    if not storage.delete_wiki_content(content_id):
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
